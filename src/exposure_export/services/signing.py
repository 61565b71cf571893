"""Detached signatures for export payloads.

Payloads are signed with ECDSA over SHA-256 and the DER-encoded signature is
wrapped in a ``TEKSignatureList`` that becomes ``export.sig``.
"""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from google.protobuf.message import DecodeError

from exposure_export.proto.export_schema import SignatureInfo, TEKSignature, TEKSignatureList
from exposure_export.schemas.records import SignatureInfoConfig
from exposure_export.services.errors import SchemaError, SigningKeyError


def load_signing_key(pem: str | bytes) -> ec.EllipticCurvePrivateKey:
    """Load a PEM-encoded EC private key.

    Raises:
        SigningKeyError: If the PEM cannot be parsed or is not an EC key.
    """
    data = pem.encode() if isinstance(pem, str) else pem
    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as err:
        raise SigningKeyError(f"Invalid signing key: {err}") from err

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise SigningKeyError(
            f"Signing key must be an EC private key, got {type(key).__name__}"
        )
    return key


def sign_payload(payload: bytes, signing_key: ec.EllipticCurvePrivateKey) -> bytes:
    """Return the DER-encoded ECDSA/SHA-256 signature of ``payload``."""
    try:
        return signing_key.sign(payload, ec.ECDSA(hashes.SHA256()))
    except (ValueError, TypeError, UnsupportedAlgorithm) as err:
        raise SigningKeyError(f"Unable to sign export payload: {err}") from err


def sign_export(
    payload: bytes,
    signing_key: ec.EllipticCurvePrivateKey,
    signature_info: SignatureInfoConfig,
    batch_num: int = 1,
    batch_size: int = 1,
) -> bytes:
    """Sign an export payload and encode the ``export.sig`` signature list.

    Args:
        payload: Complete ``export.bin`` bytes, header included.
        signing_key: Active EC private key.
        signature_info: Signer descriptor, identical to the one in the payload.
        batch_num: Position of the signed file within its batch.
        batch_size: Number of files in the batch.

    Returns:
        Serialized ``TEKSignatureList`` with exactly one signature.
    """
    signature = TEKSignature(
        signature_info=SignatureInfo(**signature_info.as_message_kwargs()),
        batch_num=batch_num,
        batch_size=batch_size,
        signature=sign_payload(payload, signing_key),
    )
    return TEKSignatureList(signatures=[signature]).SerializeToString()


def decode_signature_list(data: bytes) -> TEKSignatureList:
    """Parse an ``export.sig`` payload."""
    try:
        return TEKSignatureList.FromString(data)
    except DecodeError as err:
        raise SchemaError(f"Invalid signature list: {err}") from err


def verify_export(
    payload: bytes,
    signature_list: bytes,
    public_key: ec.EllipticCurvePublicKey,
) -> bool:
    """Verify every signature in ``signature_list`` against ``payload``.

    Returns:
        True if at least one signature is present and all of them verify.
    """
    signatures = decode_signature_list(signature_list).signatures
    if not signatures:
        return False
    try:
        for entry in signatures:
            public_key.verify(entry.signature, payload, ec.ECDSA(hashes.SHA256()))
    except InvalidSignature:
        return False
    return True


def generate_signing_key() -> tuple[str, str]:
    """Generate a P-256 key pair for local development.

    Returns:
        Tuple of (private_key_pem, public_key_pem)
    """
    private_key = ec.generate_private_key(ec.SECP256R1())
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem
