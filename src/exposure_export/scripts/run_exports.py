"""
Scheduled job that publishes exposure export bundles.

Each invocation:
1. Exports keys past the current watermark
2. Re-verifies the exports for each of the preceding midnights
3. Deletes expired keys and the bundles built from them
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from sqlalchemy.orm import Session

from exposure_export.core.settings import settings
from exposure_export.db.session import SessionLocal
from exposure_export.db.time import as_utc, utcnow
from exposure_export.services.config import ExportConfig
from exposure_export.services.encoder import decode_export
from exposure_export.services.errors import ExportError
from exposure_export.services.exporter import ExposureExporter
from exposure_export.services.packaging import read_bundle
from exposure_export.services.retention import RetentionSweeper
from exposure_export.services.signing import verify_export
from exposure_export.services.storage import ObjectStore, S3ObjectStore

logger = logging.getLogger("exposure_export")


async def run_job(
    db: Session,
    store: ObjectStore,
    config: ExportConfig,
    now: datetime,
    *,
    sweep: bool = True,
) -> None:
    """Run the full export handler against ``db`` and ``store``."""
    exporter = ExposureExporter(db, store, config)
    for result in exporter.run(now):
        logger.debug(
            "exposures %d to %d: generated=%s skipped=%s",
            result.since_exposure_id,
            result.last_exposure_id,
            [bundle.region for bundle in result.generated],
            result.skipped,
        )

    if sweep:
        sweeper = RetentionSweeper(db, store, retention_days=config.retention_days)
        await sweeper.sweep(now)


def verify_bundle(path: Path, config: ExportConfig) -> bool:
    """Check a local bundle against the configured key's public half."""
    export_bin, export_sig = read_bundle(path.read_bytes())
    export = decode_export(export_bin)
    valid = verify_export(export_bin, export_sig, config.signing_key.public_key())
    print(
        f"{path}: region={export.region} keys={len(export.keys)} "
        f"window={export.start_timestamp}-{export.end_timestamp} "
        f"signature={'valid' if valid else 'INVALID'}"
    )
    return valid


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Publish signed exposure export bundles")
    parser.add_argument(
        "--since",
        type=datetime.fromisoformat,
        default=None,
        help="Run a single export anchored at this ISO 8601 time instead of the full job.",
    )
    parser.add_argument(
        "--skip-retention",
        action="store_true",
        help="Do not delete expired keys and bundles.",
    )
    parser.add_argument(
        "--verify",
        type=Path,
        default=None,
        metavar="BUNDLE",
        help="Verify a local bundle zip and exit.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ExportConfig.from_settings(settings)
        if args.verify is not None:
            sys.exit(0 if verify_bundle(args.verify, config) else 1)

        store = S3ObjectStore.from_settings(settings)
        with SessionLocal() as db:
            if args.since is not None:
                ExposureExporter(db, store, config).export_since(as_utc(args.since))
            else:
                asyncio.run(run_job(db, store, config, utcnow(), sweep=not args.skip_retention))
    except ExportError as exc:
        logger.error("export job failed: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
