"""Tests for region resolution and partitioning."""

from __future__ import annotations

from datetime import UTC, datetime

from exposure_export.schemas.records import ExportKey, KeyRecord
from exposure_export.services.regions import partition_by_region, resolve_region

CREATED_AT = datetime(2026, 10, 18, 9, 0, tzinfo=UTC)


def _record(record_id: int, regions: tuple[str, ...]) -> KeyRecord:
    return KeyRecord(
        id=record_id,
        created_at=CREATED_AT,
        key_data=f"key-{record_id}",
        rolling_start_number=2_700_000 + record_id,
        rolling_period=144,
        transmission_risk_level=record_id % 8,
        regions=regions,
    )


def test_resolve_region_keeps_foreign_regions() -> None:
    assert resolve_region("GB", "IE", {"IE"}) == "GB"


def test_resolve_region_collapses_native_regions() -> None:
    assert resolve_region("IE", "IE", {"IE", "NI"}) == "IE"
    assert resolve_region("NI", "IE", {"IE", "NI"}) == "IE"


def test_wildcard_resolves_everything_to_default_region() -> None:
    records = [_record(1, ("GB",)), _record(2, ("DE", "FR")), _record(3, ("IE",))]

    batches = partition_by_region(records, "IE", {"*"})

    assert list(batches) == ["IE"]
    assert [key.id for key in batches["IE"]] == [1, 2, 2, 3]


def test_record_fans_out_to_every_listed_region() -> None:
    record = _record(7, ("GB", "DE"))

    batches = partition_by_region([record], "IE", set())

    assert list(batches) == ["GB", "DE"]
    expected = ExportKey(
        id=7,
        created_at=CREATED_AT,
        key_data="key-7",
        rolling_start_number=2_700_007,
        rolling_period=144,
        transmission_risk_level=7,
    )
    assert batches["GB"] == [expected]
    assert batches["DE"] == [expected]
    assert not hasattr(batches["GB"][0], "regions")


def test_batches_keep_input_order_and_first_seen_region_order() -> None:
    records = [_record(3, ("DE",)), _record(1, ("GB", "DE")), _record(2, ("GB",))]

    batches = partition_by_region(records, "IE", set())

    assert list(batches) == ["DE", "GB"]
    assert [key.id for key in batches["DE"]] == [3, 1]
    assert [key.id for key in batches["GB"]] == [1, 2]


def test_empty_input_yields_no_batches() -> None:
    assert partition_by_region([], "IE", {"*"}) == {}
