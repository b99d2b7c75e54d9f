"""Secret decryption interface (port); implemented by SecretVault."""

from typing import Protocol


class ISecretDecryptor(Protocol):
    """Decrypts config secrets. Raises DecryptionFailedException on failure."""

    def decrypt(self, ciphertext: str, name: str | None = None) -> str:
        """Return the plaintext of a config secret."""
        ...
