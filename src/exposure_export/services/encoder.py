"""Encoding of region batches into the ``export.bin`` wire format.

The payload is a fixed 16-byte header followed by a serialized
``TemporaryExposureKeyExport`` message. The exact bytes returned here are both
what gets signed and what is stored as ``export.bin`` inside the bundle.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Sequence

from google.protobuf.message import DecodeError

from exposure_export.db.time import epoch_seconds
from exposure_export.proto.export_schema import (
    SignatureInfo,
    TemporaryExposureKey,
    TemporaryExposureKeyExport,
)
from exposure_export.schemas.records import ExportKey, SignatureInfoConfig
from exposure_export.services.errors import EmptyExportError, SchemaError

logger = logging.getLogger(__name__)

EXPORT_MAGIC = "EK Export v1".ljust(16).encode("ascii")
KEY_DATA_LENGTH = 16


def decode_key_data(key_data: str) -> bytes | None:
    """Decode base64 key material, returning None when it is not decodable."""
    padding = "=" * (-len(key_data) % 4)
    try:
        return base64.b64decode(key_data + padding, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError):
        return None


def valid_key_bytes(key: ExportKey) -> bytes | None:
    """Return the raw key bytes if the key can be exported, otherwise None."""
    decoded = decode_key_data(key.key_data)
    if decoded is None or len(decoded) != KEY_DATA_LENGTH:
        return None
    return decoded


def has_exportable_keys(keys: Sequence[ExportKey]) -> bool:
    return any(valid_key_bytes(key) is not None for key in keys)


def _filter_keys(keys: Sequence[ExportKey]) -> list[TemporaryExposureKey]:
    encoded = []
    for key in keys:
        raw = valid_key_bytes(key)
        if raw is None:
            decoded = decode_key_data(key.key_data)
            length = "undecodable" if decoded is None else len(decoded)
            logger.info("excluding invalid key %s, length was %s", key.key_data, length)
            continue
        encoded.append(
            TemporaryExposureKey(
                key_data=raw,
                rolling_start_interval_number=key.rolling_start_number,
                transmission_risk_level=key.transmission_risk_level,
                rolling_period=key.rolling_period,
            )
        )
    return encoded


def encode_export(
    keys: Sequence[ExportKey],
    region: str,
    signature_info: SignatureInfoConfig,
    batch_num: int = 1,
    batch_size: int = 1,
) -> bytes:
    """Encode one batch of keys as an ``export.bin`` payload.

    Args:
        keys: Keys for a single region, already in export order.
        region: Resolved region code written into the header.
        signature_info: Signer descriptor embedded in the header.
        batch_num: Position of this file within its batch (1-based).
        batch_size: Number of files in the batch.

    Returns:
        The 16-byte magic header followed by the serialized export message.

    Raises:
        EmptyExportError: If ``keys`` is empty; the export window is undefined.
    """
    if not keys:
        raise EmptyExportError(f"No keys to export for region {region}")

    # The window covers every key in the batch, including ones dropped below.
    start_timestamp = min(epoch_seconds(key.created_at) for key in keys)
    end_timestamp = max(epoch_seconds(key.created_at) for key in keys)

    export = TemporaryExposureKeyExport(
        start_timestamp=start_timestamp,
        end_timestamp=end_timestamp,
        region=region,
        batch_num=batch_num,
        batch_size=batch_size,
        signature_infos=[SignatureInfo(**signature_info.as_message_kwargs())],
        keys=_filter_keys(keys),
    )
    return EXPORT_MAGIC + export.SerializeToString()


def decode_export(payload: bytes) -> TemporaryExposureKeyExport:
    """Parse an ``export.bin`` payload back into its message."""
    if not payload.startswith(EXPORT_MAGIC):
        raise SchemaError("Export payload is missing the EK Export v1 header")
    try:
        return TemporaryExposureKeyExport.FromString(payload[len(EXPORT_MAGIC):])
    except DecodeError as err:
        raise SchemaError(f"Invalid export payload: {err}") from err
