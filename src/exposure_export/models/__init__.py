# src/exposure_export/models/__init__.py
"""SQLAlchemy models for the exposure export job."""

from .export_file import ExposureExportFile
from .exposure import Exposure

__all__ = [
    "Exposure",
    "ExposureExportFile",
]
