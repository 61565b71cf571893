"""Export pipeline services."""

from .config import ExportConfig
from .exporter import ExposureExporter
from .retention import RetentionSweeper
from .storage import S3ObjectStore

__all__ = [
    "ExportConfig",
    "ExposureExporter",
    "RetentionSweeper",
    "S3ObjectStore",
]
