"""Print a fresh P-256 signing key pair for local development."""
from __future__ import annotations

from exposure_export.services.signing import generate_signing_key


def main() -> None:
    private_pem, public_pem = generate_signing_key()
    print(private_pem, end="")
    print(public_pem, end="")


if __name__ == "__main__":
    main()
