"""Auth providers run before SSH connections are opened."""

from .base import AuthProvider
from .os_login import OsLoginAuthProvider

__all__ = ["AuthProvider", "OsLoginAuthProvider"]
