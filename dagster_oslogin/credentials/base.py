from __future__ import annotations

from typing import Protocol

from ..models import Identity

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class IdentityCredentialsProvider(Protocol):
    """Resolves the calling identity and its authentication material."""

    def create(self) -> Identity:
        """Return the identity.

        Raises ``OSError`` or ``ValueError`` when the source is unusable.
        """
        ...

    def info(self) -> str:
        """Describe the credential source for error messages (no secrets)."""
        ...
