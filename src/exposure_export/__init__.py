"""Signed, region-partitioned exposure key export bundles."""

__version__ = "0.1.0"
