"""Generate a vault key pair for staticimp.

Usage:
    python -m scripts.generate_vault_key <private_key_path> [key_size]

Writes the private key (PKCS#8 PEM, mode 0600) to <private_key_path> and
prints the public key. Set STATICIMP_VAULT_PRIVATE_KEY_PATH to the private
key path; hand the public key to config authors for encrypt_secret. If
STATICIMP_VAULT_PRIVATE_KEY_PASSWORD is set, the key is encrypted with it.
"""

import os
import sys
from pathlib import Path

from staticimp.infrastructure.security import SecretVault, generate_private_key_pem
from staticimp.infrastructure.security.vault import DEFAULT_KEY_SIZE


def main() -> None:
    """Write a new private key and print its public half."""
    if len(sys.argv) < 2:
        print(
            "Usage: python -m scripts.generate_vault_key <private_key_path> [key_size]",
            file=sys.stderr,
        )
        sys.exit(1)
    path = Path(sys.argv[1])
    key_size = int(sys.argv[2]) if len(sys.argv) > 2 else DEFAULT_KEY_SIZE
    if path.exists():
        print(f"Refusing to overwrite existing key: {path}", file=sys.stderr)
        sys.exit(1)

    password = os.environ.get("STATICIMP_VAULT_PRIVATE_KEY_PASSWORD") or None
    pem = generate_private_key_pem(key_size, password)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(pem)

    vault = SecretVault.from_pem(bytearray(pem), password)
    print(f"Private key written to {path}", file=sys.stderr)
    print(vault.public_key_pem().decode("ascii"), end="")
    vault.close()


if __name__ == "__main__":
    main()
