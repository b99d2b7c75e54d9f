"""Security infrastructure: secret vault."""

from staticimp.infrastructure.security.vault import (
    SecretVault,
    decrypt_secret,
    encrypt_secret,
    generate_private_key_pem,
)

__all__ = ["SecretVault", "decrypt_secret", "encrypt_secret", "generate_private_key_pem"]
