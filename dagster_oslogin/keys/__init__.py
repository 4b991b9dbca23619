"""Key generation, registration and caching."""

from .generator import KeyPairGenerator, RsaKeyPairGenerator, compute_fingerprint
from .manager import EphemeralKeyManager
from .registry import OsLoginKeyRegistry, RemoteKeyRegistry, to_account_binding

__all__ = [
    "KeyPairGenerator",
    "RsaKeyPairGenerator",
    "compute_fingerprint",
    "EphemeralKeyManager",
    "OsLoginKeyRegistry",
    "RemoteKeyRegistry",
    "to_account_binding",
]
