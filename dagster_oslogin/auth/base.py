from __future__ import annotations

from typing import Optional, Protocol


class AuthProvider(Protocol):
    """Interface for pluggable auth providers used before SSH connections."""

    key_path: str

    def ensure(self) -> None:
        """Ensure the key at ``key_path`` is valid (refresh if needed)."""
        ...

    @property
    def username(self) -> Optional[str]:
        """Login user that goes with the current key, once known."""
        ...
