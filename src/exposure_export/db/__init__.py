# src/exposure_export/db/__init__.py
"""Database configuration and utilities."""

from .session import SessionLocal

__all__ = ["SessionLocal"]
