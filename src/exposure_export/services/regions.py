"""Grouping of exposure keys into per-region batches."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from exposure_export.schemas.records import ExportKey, KeyRecord

WILDCARD_REGION = "*"


def resolve_region(region: str, default_region: str, native_regions: Collection[str]) -> str:
    """Map a declared region onto the region it is served from.

    Regions the operator serves natively (or every region, when the wildcard
    is configured) collapse onto the default region; anything else is kept.
    """
    if WILDCARD_REGION in native_regions or region in native_regions:
        return default_region
    return region


def partition_by_region(
    records: Iterable[KeyRecord],
    default_region: str,
    native_regions: Collection[str],
) -> dict[str, list[ExportKey]]:
    """Fan records out into one batch per resolved region.

    A record listing several regions lands in several batches. Batches keep
    first-seen region order and the input order of records.
    """
    batches: dict[str, list[ExportKey]] = {}
    for record in records:
        key = record.without_regions()
        for region in record.regions:
            target = resolve_region(region, default_region, native_regions)
            batches.setdefault(target, []).append(key)
    return batches
