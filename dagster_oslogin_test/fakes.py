"""In-memory stand-ins for the key manager's collaborators."""

import base64
from typing import Optional

from loguru import logger

from dagster_oslogin.keys.generator import compute_fingerprint
from dagster_oslogin.models import (
    AccountBinding,
    Identity,
    PosixAccount,
    SshKeyPair,
    SshPublicKeyInfo,
)

START_TIME_MS = 1_700_000_000_000


class FakeClock:
    """Manually advanced clock; returns epoch seconds like ``time.time``."""

    def __init__(self, now_ms: int = START_TIME_MS):
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms / 1_000

    def advance_ms(self, ms: int) -> None:
        self.now_ms += ms


class FakeCredentialsProvider:
    def __init__(self, email="svc@proj.iam", project_id="proj", error=None):
        self.email = email
        self.project_id = project_id
        self.error = error
        self.calls = 0

    def create(self) -> Identity:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return Identity(
            client_email=self.email, project_id=self.project_id, credentials=object()
        )

    def info(self) -> str:
        return f"fake credentials for {self.email}"


class FakeKeyGenerator:
    """Produces distinct, well-formed OpenSSH public keys without real crypto."""

    def __init__(self):
        self.calls: list[tuple[str, int]] = []

    def generate(self, principal: str, key_size: int) -> SshKeyPair:
        self.calls.append((principal, key_size))
        blob = base64.b64encode(f"key-{len(self.calls)}".encode()).decode()
        public_key = f"ssh-rsa {blob} {principal}"
        return SshKeyPair(
            public_key=public_key,
            private_key=f"private-{len(self.calls)}",
            fingerprint=compute_fingerprint(public_key),
        )


class FakeRegistry:
    """In-memory registry that answers with configurable account bindings."""

    def __init__(
        self,
        usernames=("svc_proj_iam",),
        server_expiry_usec: Optional[int] = None,
        error: Optional[Exception] = None,
    ):
        self.usernames = list(usernames)
        self.server_expiry_usec = server_expiry_usec
        self.error = error
        self.calls: list[dict] = []

    def import_public_key(self, principal, public_key, ttl_usec, project_id):
        self.calls.append(
            {
                "principal": principal,
                "public_key": public_key,
                "ttl_usec": ttl_usec,
                "project_id": project_id,
            }
        )
        logger.debug(f"fake import #{len(self.calls)} for {principal}")
        if self.error is not None:
            raise self.error
        keys = {}
        if self.server_expiry_usec is not None:
            fingerprint = compute_fingerprint(public_key)
            keys[fingerprint] = SshPublicKeyInfo(
                key=public_key,
                fingerprint=fingerprint,
                expiration_time_usec=self.server_expiry_usec,
            )
        return AccountBinding(
            posix_accounts=tuple(PosixAccount(username=u) for u in self.usernames),
            ssh_public_keys=keys,
        )


