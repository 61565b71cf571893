"""Data access helpers for exposure keys and export file metadata."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from exposure_export.models import Exposure, ExposureExportFile
from exposure_export.schemas.records import KeyRecord

__all__ = ["ExportRepository"]


class ExportRepository:
    """Thin wrapper around database access for the export job.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def fetch_keys_since(self, exposure_id: int) -> list[KeyRecord]:
        """Return keys with an id above ``exposure_id``, ordered by key data."""
        rows = self.session.scalars(
            select(Exposure)
            .where(Exposure.id > exposure_id)
            .order_by(Exposure.key_data.asc(), Exposure.id.asc())
        )
        return [KeyRecord.from_row(row) for row in rows]

    def max_last_exposure_id_before(self, timestamp: datetime) -> int:
        """Return the highest watermark among bundles created before ``timestamp``."""
        result = self.session.scalar(
            select(func.coalesce(func.max(ExposureExportFile.last_exposure_id), 0)).where(
                ExposureExportFile.created_at < timestamp
            )
        )
        return int(result or 0)

    def bundle_exists(self, since_exposure_id: int, last_exposure_id: int, region: str) -> bool:
        """Return True if a bundle already covers this range for ``region``."""
        found = self.session.scalar(
            select(ExposureExportFile.id)
            .where(
                ExposureExportFile.since_exposure_id == since_exposure_id,
                ExposureExportFile.last_exposure_id == last_exposure_id,
                ExposureExportFile.region == region,
            )
            .limit(1)
        )
        return found is not None

    def insert_bundle_metadata(
        self,
        *,
        path: str,
        exposure_count: int,
        since_exposure_id: int,
        last_exposure_id: int,
        first_exposure_created_at: datetime,
        region: str,
        created_at: datetime | None = None,
    ) -> ExposureExportFile:
        """Insert a metadata row for an uploaded bundle.

        Raises:
            sqlalchemy.exc.IntegrityError: If the range/region triple already exists.
        """
        record = ExposureExportFile(
            path=path,
            exposure_count=exposure_count,
            since_exposure_id=since_exposure_id,
            last_exposure_id=last_exposure_id,
            first_exposure_created_at=first_exposure_created_at,
            region=region,
        )
        if created_at is not None:
            record.created_at = created_at
        self.session.add(record)
        self.session.flush()
        return record

    def delete_expired_keys(self, threshold: datetime) -> list[int]:
        """Delete keys created before ``threshold`` and return their ids."""
        ids = list(
            self.session.scalars(select(Exposure.id).where(Exposure.created_at < threshold))
        )
        if ids:
            self.session.execute(
                delete(Exposure).where(Exposure.id.in_(ids)),
                execution_options={"synchronize_session": False},
            )
        return ids

    def delete_bundle_metadata_with_last_id_at_most(
        self, exposure_id: int
    ) -> list[tuple[int, str]]:
        """Delete bundles whose watermark is at or below ``exposure_id``.

        Returns:
            ``(id, path)`` for every deleted row.
        """
        rows = [
            (row.id, row.path)
            for row in self.session.execute(
                select(ExposureExportFile.id, ExposureExportFile.path)
                .where(ExposureExportFile.last_exposure_id <= exposure_id)
                .order_by(ExposureExportFile.id)
            )
        ]
        if rows:
            self.session.execute(
                delete(ExposureExportFile).where(
                    ExposureExportFile.id.in_([row_id for row_id, _ in rows])
                ),
                execution_options={"synchronize_session": False},
            )
        return rows
