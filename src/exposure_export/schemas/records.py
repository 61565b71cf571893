"""In-memory record types passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ExportKey:
    """An exposure key as it is grouped into a region batch."""

    id: int
    created_at: datetime
    key_data: str
    rolling_start_number: int
    rolling_period: int
    transmission_risk_level: int


@dataclass(frozen=True)
class KeyRecord:
    """An exposure key row together with the regions it is destined for."""

    id: int
    created_at: datetime
    key_data: str
    rolling_start_number: int
    rolling_period: int
    transmission_risk_level: int
    regions: tuple[str, ...]

    @classmethod
    def from_row(cls, row: Any) -> KeyRecord:
        """Build a record from an ``Exposure`` ORM instance or similar object."""
        return cls(
            id=row.id,
            created_at=row.created_at,
            key_data=row.key_data,
            rolling_start_number=row.rolling_start_number,
            rolling_period=row.rolling_period,
            transmission_risk_level=row.transmission_risk_level,
            regions=tuple(row.regions),
        )

    def without_regions(self) -> ExportKey:
        return ExportKey(
            id=self.id,
            created_at=self.created_at,
            key_data=self.key_data,
            rolling_start_number=self.rolling_start_number,
            rolling_period=self.rolling_period,
            transmission_risk_level=self.transmission_risk_level,
        )


@dataclass(frozen=True)
class SignatureInfoConfig:
    """Static signer descriptor embedded in every bundle."""

    app_bundle_id: str = ""
    android_package: str = ""
    verification_key_version: str = ""
    verification_key_id: str = ""
    signature_algorithm: str = "1.2.840.10045.4.3.2"

    def as_message_kwargs(self) -> dict[str, str]:
        return {
            "app_bundle_id": self.app_bundle_id,
            "android_package": self.android_package,
            "verification_key_version": self.verification_key_version,
            "verification_key_id": self.verification_key_id,
            "signature_algorithm": self.signature_algorithm,
        }
