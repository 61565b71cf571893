"""Per-invocation export configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.hazmat.primitives.asymmetric import ec

from exposure_export.core.settings import Settings
from exposure_export.schemas.records import SignatureInfoConfig
from exposure_export.services.errors import ConfigurationError
from exposure_export.services.signing import load_signing_key


@dataclass(frozen=True)
class ExportConfig:
    """Everything one export run needs besides the database and object store.

    Built once at the start of an invocation and passed explicitly to the
    exporter, so nothing is read from process-wide state mid-run.
    """

    signing_key: ec.EllipticCurvePrivateKey
    signature_info: SignatureInfoConfig
    default_region: str
    native_regions: frozenset[str] = field(default_factory=frozenset)
    retention_days: int = 14
    backfill_days: int = 14

    @classmethod
    def from_settings(cls, settings: Settings) -> ExportConfig:
        """Build the run configuration from application settings.

        Raises:
            ConfigurationError: If no signing key is configured.
            SigningKeyError: If the configured key cannot be loaded.
        """
        if not settings.signing_private_key:
            raise ConfigurationError("EXPORT_SIGNING_KEY is not configured")

        return cls(
            signing_key=load_signing_key(settings.signing_private_key),
            signature_info=SignatureInfoConfig(
                app_bundle_id=settings.app_bundle_id,
                android_package=settings.android_package,
                verification_key_version=settings.verification_key_version,
                verification_key_id=settings.verification_key_id,
                signature_algorithm=settings.signature_algorithm,
            ),
            default_region=settings.default_region,
            native_regions=frozenset(settings.native_regions),
            retention_days=settings.retention_days,
            backfill_days=settings.backfill_days,
        )
