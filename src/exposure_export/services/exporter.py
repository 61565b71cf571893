"""Generation of signed, region-partitioned export bundles.

This module provides the ExposureExporter class that drives one export run:
it anchors the run to the last known watermark, partitions new keys by region
and writes one bundle plus one metadata row per region that has not been
exported for that range yet.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from exposure_export.db.time import as_utc, epoch_millis, utcnow
from exposure_export.repositories.export_repo import ExportRepository
from exposure_export.schemas.records import ExportKey
from exposure_export.services.config import ExportConfig
from exposure_export.services.encoder import encode_export, has_exportable_keys
from exposure_export.services.packaging import package_bundle
from exposure_export.services.regions import partition_by_region
from exposure_export.services.signing import sign_export
from exposure_export.services.storage import ObjectStore

# Configure logger for this module
logger = logging.getLogger(__name__)

BUNDLE_CONTENT_TYPE = "application/zip"
BUNDLE_ACL = "private"

# Single-file batches; larger batches would split a region across files.
BATCH_NUM = 1
BATCH_SIZE = 1


def bundle_path(region: str, generated_at: datetime) -> str:
    """Return the object key for a bundle generated at ``generated_at``."""
    return f"exposures/{region.lower()}/{epoch_millis(generated_at)}.zip"


def backfill_cutoffs(now: datetime, days: int) -> list[datetime]:
    """Return ``now`` followed by today's UTC midnight and the ``days - 1`` before it."""
    midnight = as_utc(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return [now] + [midnight - timedelta(days=offset) for offset in range(days)]


@dataclass
class GeneratedBundle:
    """A bundle written during an export run."""

    region: str
    path: str
    exposure_count: int


@dataclass
class ExportRunResult:
    """Outcome of a single ``export_since`` call."""

    since_exposure_id: int
    last_exposure_id: int
    generated: list[GeneratedBundle] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class ExposureExporter:
    """Builds and uploads export bundles for keys past the current watermark."""

    def __init__(
        self,
        db_session: Session,
        store: ObjectStore,
        config: ExportConfig,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the exporter.

        Args:
            db_session: Session used for reads and metadata inserts. The
                exporter commits after each region's metadata row.
            store: Object store receiving the bundle archives.
            config: Signing key, signature info and region policy for this run.
            clock: Source of the current time for paths and row timestamps.
        """
        self.session = db_session
        self.repo = ExportRepository(db_session)
        self.store = store
        self.config = config
        self.clock = clock

    def build_bundle(self, keys: Sequence[ExportKey], region: str) -> bytes:
        """Encode, sign and package one region batch into archive bytes."""
        signature_info = self.config.signature_info
        export_bin = encode_export(keys, region, signature_info, BATCH_NUM, BATCH_SIZE)
        export_sig = sign_export(
            export_bin, self.config.signing_key, signature_info, BATCH_NUM, BATCH_SIZE
        )
        return package_bundle(export_bin, export_sig)

    def export_since(self, since: datetime) -> ExportRunResult:
        """Export every key newer than the watermark known as of ``since``.

        Args:
            since: Cutoff; only bundles created before it anchor the run.

        Returns:
            The id range used and the regions generated or skipped.
        """
        first_exposure_id = self.repo.max_last_exposure_id_before(since)
        records = self.repo.fetch_keys_since(first_exposure_id)

        if not records:
            return ExportRunResult(first_exposure_id, first_exposure_id)

        last_exposure_id = max(record.id for record in records)
        first_exposure_created_at = min(record.created_at for record in records)

        result = ExportRunResult(first_exposure_id, last_exposure_id)
        batches = partition_by_region(
            records, self.config.default_region, self.config.native_regions
        )

        for region, keys in batches.items():
            if self.repo.bundle_exists(first_exposure_id, last_exposure_id, region):
                logger.info(
                    "file for %s exposures %d to %d already exists",
                    region,
                    first_exposure_id,
                    last_exposure_id,
                )
                result.skipped.append(region)
                continue

            if not has_exportable_keys(keys):
                logger.info(
                    "skipping %s exposures %d to %d, no valid keys in %d record(s)",
                    region,
                    first_exposure_id,
                    last_exposure_id,
                    len(keys),
                )
                result.skipped.append(region)
                continue

            try:
                bundle = self._generate(
                    region, keys, first_exposure_id, last_exposure_id, first_exposure_created_at
                )
            except Exception:
                logger.error(
                    "export of %s exposures %d to %d failed",
                    region,
                    first_exposure_id,
                    last_exposure_id,
                    exc_info=True,
                )
                self.session.rollback()
                raise
            result.generated.append(bundle)

        return result

    def _generate(
        self,
        region: str,
        keys: Sequence[ExportKey],
        first_exposure_id: int,
        last_exposure_id: int,
        first_exposure_created_at: datetime,
    ) -> GeneratedBundle:
        logger.info(
            "generating file for %s exposures %d to %d",
            region,
            first_exposure_id,
            last_exposure_id,
        )
        body = self.build_bundle(keys, region)

        now = self.clock()
        path = bundle_path(region, now)

        # Upload before recording; a crash in between only causes a rewrite on retry.
        self.store.put(path, body, BUNDLE_CONTENT_TYPE, BUNDLE_ACL)

        self.repo.insert_bundle_metadata(
            path=path,
            exposure_count=len(keys),
            since_exposure_id=first_exposure_id,
            last_exposure_id=last_exposure_id,
            first_exposure_created_at=first_exposure_created_at,
            region=region,
            created_at=now,
        )
        self.session.commit()

        return GeneratedBundle(region=region, path=path, exposure_count=len(keys))

    def run(self, now: datetime | None = None) -> list[ExportRunResult]:
        """Export for ``now`` and re-verify each of the preceding midnights."""
        now = now or self.clock()
        return [
            self.export_since(cutoff)
            for cutoff in backfill_cutoffs(now, self.config.backfill_days)
        ]
