"""Encrypt a secret for a staticimp config file.

Usage:
    python -m scripts.encrypt_secret <public_key_path> [secret]

Reads the secret from stdin when it is not given as an argument (keeps it
out of shell history). Prints the base64 ciphertext to paste into
`secrets:` or `encrypted_token:`.
"""

import sys
from pathlib import Path

from staticimp.infrastructure.security import encrypt_secret


def main() -> None:
    """Print the ciphertext of one secret."""
    if len(sys.argv) < 2:
        print(
            "Usage: python -m scripts.encrypt_secret <public_key_path> [secret]",
            file=sys.stderr,
        )
        sys.exit(1)
    public_key = Path(sys.argv[1]).read_bytes()
    secret = sys.argv[2] if len(sys.argv) > 2 else sys.stdin.read().rstrip("\n")
    if not secret:
        print("Empty secret", file=sys.stderr)
        sys.exit(1)
    try:
        print(encrypt_secret(secret, public_key))
    except ValueError as e:
        print(f"Encryption failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
