"""Secret vault: RSA-OAEP encryption for values stored in config files.

Config authors encrypt short secrets (a spam-check key, a backend token) with
the service's public key and commit the base64 ciphertext to a project
config file. Only the running service, holding the private key, can read
them.

Ciphertext format: base64 (standard alphabet) of RSA-OAEP with SHA-256 for
both the hash and MGF1. With a 4096-bit key the plaintext limit is 446
bytes, which is plenty for tokens.

Errors never carry ciphertext, plaintext, or key material.
"""

from __future__ import annotations

import base64
import binascii
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from staticimp.domain.exceptions import (
    DecryptionFailedException,
    VaultUnavailableException,
)
from staticimp.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from staticimp.core.config import Settings

logger = get_logger(__name__)

DEFAULT_KEY_SIZE = 4096


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def _zero(buffer: bytearray) -> None:
    for i in range(len(buffer)):
        buffer[i] = 0


def _load_private_key(pem: bytes | bytearray, password: bytes | None) -> rsa.RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(bytes(pem), password=password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise VaultUnavailableException("Vault private key could not be loaded") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise VaultUnavailableException("Vault private key must be an RSA key")
    return key


def generate_private_key_pem(key_size: int = DEFAULT_KEY_SIZE, password: str | None = None) -> bytes:
    """Generate a new RSA private key as PKCS#8 PEM (optionally password-protected)."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    encryption: serialization.KeySerializationEncryption = (
        serialization.BestAvailableEncryption(password.encode("utf-8"))
        if password
        else serialization.NoEncryption()
    )
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption,
    )


def encrypt_secret(plaintext: str, public_key_pem: bytes | str) -> str:
    """Encrypt a secret for a config file using the service's public key.

    Raises:
        ValueError: the public key is not an RSA PEM key, or plaintext too long.
    """
    pem = public_key_pem.encode("ascii") if isinstance(public_key_pem, str) else public_key_pem
    public_key = serialization.load_pem_public_key(pem)
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise ValueError("public key must be an RSA key")
    ciphertext = public_key.encrypt(plaintext.encode("utf-8"), _oaep())
    return base64.b64encode(ciphertext).decode("ascii")


def decrypt_secret(ciphertext: str, private_key: rsa.RSAPrivateKey) -> str:
    """Decrypt a base64 ciphertext with the given private key.

    Raises:
        DecryptionFailedException: bad base64, tampered ciphertext, wrong key,
            or a plaintext that is not UTF-8.
    """
    try:
        raw = base64.b64decode(ciphertext.strip(), validate=True)
        return private_key.decrypt(raw, _oaep()).decode("utf-8")
    except (ValueError, binascii.Error, UnicodeDecodeError) as e:
        raise DecryptionFailedException() from e


class SecretVault:
    """Holds the service private key for the process lifetime.

    Constructed once at startup and passed to whatever needs to decrypt;
    close() on shutdown drops the key.
    """

    def __init__(self, private_key: rsa.RSAPrivateKey) -> None:
        self._private_key: rsa.RSAPrivateKey | None = private_key

    def __repr__(self) -> str:
        state = "loaded" if self._private_key is not None else "closed"
        return f"<SecretVault {state}>"

    @classmethod
    def from_pem(cls, pem: bytes | bytearray | str, password: str | None = None) -> SecretVault:
        """Build a vault from PEM text. A bytearray argument is zeroed after parsing."""
        buffer = bytearray(pem.encode("ascii") if isinstance(pem, str) else pem)
        try:
            key = _load_private_key(buffer, password.encode("utf-8") if password else None)
        finally:
            _zero(buffer)
            if isinstance(pem, bytearray):
                _zero(pem)
        return cls(key)

    @classmethod
    def from_file(cls, path: str | Path, password: str | None = None) -> SecretVault:
        """Read a PEM private key from disk."""
        try:
            buffer = bytearray(Path(path).read_bytes())
        except OSError as e:
            raise VaultUnavailableException(f"Vault key file not readable: {path}") from e
        return cls.from_pem(buffer, password)

    @classmethod
    def from_settings(cls, settings: Settings) -> SecretVault | None:
        """Build the vault from settings; None when no key source is configured."""
        if not settings.vault_configured:
            return None
        password = (
            settings.vault_private_key_password.get_secret_value()
            if settings.vault_private_key_password is not None
            else None
        )
        if settings.vault_private_key_path:
            vault = cls.from_file(settings.vault_private_key_path, password)
        else:
            assert settings.vault_private_key is not None
            vault = cls.from_pem(settings.vault_private_key.get_secret_value(), password)
        logger.info("Secret vault loaded")
        return vault

    @property
    def is_open(self) -> bool:
        return self._private_key is not None

    def _key(self) -> rsa.RSAPrivateKey:
        if self._private_key is None:
            raise VaultUnavailableException("Secret vault is closed")
        return self._private_key

    def decrypt(self, ciphertext: str, name: str | None = None) -> str:
        """Decrypt a config secret. `name` only labels the error details."""
        try:
            return decrypt_secret(ciphertext, self._key())
        except DecryptionFailedException as e:
            raise DecryptionFailedException(name) from e.__cause__

    def encrypt(self, plaintext: str) -> str:
        """Encrypt with this vault's public key (config authoring, tests)."""
        return encrypt_secret(plaintext, self.public_key_pem())

    def public_key_pem(self) -> bytes:
        """Public half of the key, PEM/SubjectPublicKeyInfo."""
        return self._key().public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def close(self) -> None:
        """Drop the private key; later decrypt calls raise VaultUnavailableException."""
        if self._private_key is not None:
            self._private_key = None
            logger.info("Secret vault closed")
