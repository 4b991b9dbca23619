"""Value types shared by the key manager and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Identity:
    """The principal on whose behalf SSH keys are provisioned."""

    client_email: str
    project_id: str
    credentials: Any = field(repr=False, compare=False)

    @property
    def principal(self) -> str:
        """OS Login user name, e.g. ``users/svc@proj.iam.gserviceaccount.com``."""
        return f"users/{self.client_email}"


@dataclass(frozen=True)
class SshKeyPair:
    public_key: str
    private_key: str = field(repr=False)
    fingerprint: str


@dataclass(frozen=True)
class PosixAccount:
    username: str
    uid: int = 0
    gid: int = 0
    home_directory: str = ""
    shell: str = ""
    primary: bool = False
    system_id: str = ""
    account_id: str = ""


@dataclass(frozen=True)
class SshPublicKeyInfo:
    key: str
    fingerprint: str
    # 0 means the key has no server-side expiry
    expiration_time_usec: int = 0


@dataclass(frozen=True)
class AccountBinding:
    """POSIX accounts and key metadata returned after importing a key."""

    posix_accounts: tuple[PosixAccount, ...] = ()
    ssh_public_keys: Mapping[str, SshPublicKeyInfo] = field(default_factory=dict)

    def key_info(self, fingerprint: str) -> Optional[SshPublicKeyInfo]:
        return self.ssh_public_keys.get(fingerprint)


@dataclass(frozen=True)
class Credential:
    """A provisioned key pair with its login user and expiry (epoch ms)."""

    key_pair: SshKeyPair
    username: str
    expiration_time_ms: int

    @property
    def public_key(self) -> str:
        return self.key_pair.public_key

    @property
    def private_key(self) -> str:
        return self.key_pair.private_key

    @property
    def fingerprint(self) -> str:
        return self.key_pair.fingerprint

    def expires_within(self, margin_ms: int, now_ms: int) -> bool:
        """Return True if the credential is expired ``margin_ms`` from ``now_ms``."""
        return now_ms + margin_ms > self.expiration_time_ms
