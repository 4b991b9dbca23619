from __future__ import annotations

import contextlib
import os
import tempfile
from dataclasses import dataclass, field
from typing import Optional

from dagster import get_dagster_logger

from ..keys.manager import EphemeralKeyManager
from ..models import Credential


@dataclass
class OsLoginAuthProvider:
    """Auth provider that keeps an OS Login key pair on disk for ``ssh -i``.

    The key file is a working copy for the ssh client only; it is rewritten
    whenever the manager hands out a different key and never read back.
    """

    manager: EphemeralKeyManager
    key_path: str
    ttl_ms: int = 600_000
    key_size: int = 2048
    _credential: Optional[Credential] = field(default=None, init=False, repr=False)
    _written_fingerprint: Optional[str] = field(default=None, init=False, repr=False)

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    @property
    def username(self) -> Optional[str]:
        return self._credential.username if self._credential else None

    def ensure(self) -> None:
        """Refresh the OS Login key if missing or expiring and write it out."""
        credential = self.manager.refresh(self.ttl_ms, self.key_size)
        self._credential = credential
        if credential.fingerprint == self._written_fingerprint:
            return
        self._write_key_files(credential)
        self._written_fingerprint = credential.fingerprint
        get_dagster_logger().info(
            f"Wrote OS Login key for {credential.username} to {self.key_path}"
        )

    def _write_key_files(self, credential: Credential) -> None:
        key_path = os.path.expanduser(self.key_path)
        key_dir = os.path.dirname(key_path)
        if key_dir:
            os.makedirs(key_dir, mode=0o700, exist_ok=True)

        # ssh refuses private keys readable by others
        _replace_file(key_path, credential.private_key, 0o600)
        _replace_file(key_path + ".pub", credential.public_key + "\n", 0o644)


def _replace_file(path: str, content: str, mode: int) -> None:
    """Write ``content`` to a fresh file next to ``path`` and rename it over.

    The file is created exclusively (``mkstemp`` opens with ``O_EXCL`` and
    ``O_NOFOLLOW``) with mode 0600, so nothing already sitting at ``path``,
    including a symlink, ever receives the content.
    """
    fd, tmp_path = tempfile.mkstemp(
        dir=os.path.dirname(path) or ".", prefix=".oslogin-"
    )
    try:
        with os.fdopen(fd, "w") as handle:
            if mode != 0o600:
                os.fchmod(handle.fileno(), mode)
            handle.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_path)
        raise
