# src/exposure_export/schemas/__init__.py
"""
Record types passed between the repository and the export pipeline.
"""

from .records import ExportKey, KeyRecord, SignatureInfoConfig

__all__ = [
    "ExportKey",
    "KeyRecord",
    "SignatureInfoConfig",
]
