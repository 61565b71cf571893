"""Zip packaging of signed export bundles."""

from __future__ import annotations

import io
import zipfile

EXPORT_BIN = "export.bin"
EXPORT_SIG = "export.sig"

# Fixed entry metadata so identical inputs always yield identical archives.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
_FILE_MODE = 0o100644 << 16


def _entry(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=_ZIP_EPOCH)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = _FILE_MODE
    return info


def package_bundle(export_bin: bytes, export_sig: bytes) -> bytes:
    """Return a zip archive holding ``export.bin`` followed by ``export.sig``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr(_entry(EXPORT_BIN), export_bin)
        archive.writestr(_entry(EXPORT_SIG), export_sig)
    return buffer.getvalue()


def read_bundle(archive: bytes) -> tuple[bytes, bytes]:
    """Extract ``(export_bin, export_sig)`` from a bundle archive."""
    with zipfile.ZipFile(io.BytesIO(archive)) as bundle:
        return bundle.read(EXPORT_BIN), bundle.read(EXPORT_SIG)
