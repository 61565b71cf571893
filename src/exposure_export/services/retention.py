"""Expiry of old exposure keys and the bundles built from them."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from exposure_export.db.time import utcnow
from exposure_export.repositories.export_repo import ExportRepository
from exposure_export.services.errors import RetentionError
from exposure_export.services.storage import ObjectStore

logger = logging.getLogger(__name__)

RETENTION_DAYS = 14


@dataclass
class SweepResult:
    """Rows and objects removed by a retention sweep."""

    deleted_exposure_ids: list[int] = field(default_factory=list)
    deleted_paths: list[str] = field(default_factory=list)


class RetentionSweeper:
    """Deletes expired keys, then every bundle whose range they fully cover.

    Database deletes and object deletes share one transaction: the rows are
    only committed once every object delete has succeeded, so a failed sweep
    is retried in full on the next invocation.
    """

    def __init__(
        self,
        db_session: Session,
        store: ObjectStore,
        retention_days: int = RETENTION_DAYS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session = db_session
        self.repo = ExportRepository(db_session)
        self.store = store
        self.retention = timedelta(days=retention_days)
        self.clock = clock

    async def sweep(self, now: datetime | None = None) -> SweepResult:
        """Remove keys older than the retention window and their bundles.

        Raises:
            RetentionError: If any object delete failed. Nothing is committed.
        """
        now = now or self.clock()
        try:
            exposure_ids = self.repo.delete_expired_keys(now - self.retention)
            watermark = max(exposure_ids, default=0)
            files = self.repo.delete_bundle_metadata_with_last_id_at_most(watermark)

            for file_id, path in files:
                logger.info("removing old file %d with path %s", file_id, path)

            await self._delete_objects([path for _, path in files])
        except Exception:
            self.session.rollback()
            raise

        self.session.commit()
        logger.info(
            "retention sweep removed %d exposure(s) and %d file(s)",
            len(exposure_ids),
            len(files),
        )
        return SweepResult(
            deleted_exposure_ids=exposure_ids,
            deleted_paths=[path for _, path in files],
        )

    async def _delete_objects(self, paths: list[str]) -> None:
        """Issue all deletes concurrently and report every failure together."""
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(self.store.delete, path) for path in paths),
            return_exceptions=True,
        )

        failures: dict[str, BaseException] = {}
        for path, outcome in zip(paths, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning("failed to delete %s: %s", path, outcome)
                failures[path] = outcome

        if failures:
            raise RetentionError(failures)
