"""Application interfaces (ports): backend and secret protocols.

No runtime imports from staticimp.infrastructure.
"""

from staticimp.application.interfaces.backends import IRepositoryBackend
from staticimp.application.interfaces.security import ISecretDecryptor

__all__ = ["IRepositoryBackend", "ISecretDecryptor"]
