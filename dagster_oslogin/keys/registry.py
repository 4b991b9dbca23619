"""Public key registries that bind keys to POSIX accounts."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional, Protocol

from dagster import get_dagster_logger
from google.api_core.client_options import ClientOptions
from google.api_core.exceptions import GoogleAPIError
from google.cloud import oslogin_v1

from ..errors import RegistryUnavailableError
from ..models import AccountBinding, Identity, PosixAccount, SshPublicKeyInfo


class RemoteKeyRegistry(Protocol):
    """Imports a public key for a principal and reports its account binding."""

    def import_public_key(
        self, principal: str, public_key: str, ttl_usec: int, project_id: str
    ) -> AccountBinding:
        """Import ``public_key`` so it stays valid for ``ttl_usec`` microseconds.

        Raises:
            RegistryUnavailableError: On transport or service failures

        """
        ...


class OsLoginKeyRegistry:
    """Google Cloud OS Login backed registry.

    A client is opened per import and closed afterwards, so the registry
    itself holds no connection state and is safe to share between threads.
    """

    def __init__(
        self,
        credentials: Any,
        api_endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.credentials = credentials
        self.api_endpoint = api_endpoint
        self.timeout = timeout
        self._clock = clock
        self.logger = get_dagster_logger()

    @classmethod
    def from_identity(
        cls,
        identity: Identity,
        api_endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> "OsLoginKeyRegistry":
        return cls(identity.credentials, api_endpoint=api_endpoint, timeout=timeout)

    def _create_client(self) -> oslogin_v1.OsLoginServiceClient:
        client_options = (
            ClientOptions(api_endpoint=self.api_endpoint) if self.api_endpoint else None
        )
        return oslogin_v1.OsLoginServiceClient(
            credentials=self.credentials, client_options=client_options
        )

    def import_public_key(
        self, principal: str, public_key: str, ttl_usec: int, project_id: str
    ) -> AccountBinding:
        # OS Login wants an absolute expiry
        expiration_time_usec = round(self._clock() * 1_000_000) + ttl_usec
        request = oslogin_v1.ImportSshPublicKeyRequest(
            parent=principal,
            ssh_public_key={
                "key": public_key,
                "expiration_time_usec": expiration_time_usec,
            },
            project_id=project_id,
        )
        self.logger.debug(
            f"Importing SSH public key for {principal} in project {project_id}"
        )
        try:
            with self._create_client() as client:
                if self.timeout is not None:
                    response = client.import_ssh_public_key(
                        request=request, timeout=self.timeout
                    )
                else:
                    response = client.import_ssh_public_key(request=request)
        except GoogleAPIError as e:
            raise RegistryUnavailableError(
                f"Cannot import SSH key for {principal}: {e}"
            ) from e
        return to_account_binding(response.login_profile)


def to_account_binding(login_profile: Any) -> AccountBinding:
    """Convert an OS Login ``LoginProfile`` message into an AccountBinding."""
    accounts = tuple(
        PosixAccount(
            username=account.username,
            uid=account.uid,
            gid=account.gid,
            home_directory=account.home_directory,
            shell=account.shell,
            primary=account.primary,
            system_id=account.system_id,
            account_id=account.account_id,
        )
        for account in login_profile.posix_accounts
    )
    keys = {
        fingerprint: SshPublicKeyInfo(
            key=key.key,
            fingerprint=key.fingerprint or fingerprint,
            expiration_time_usec=key.expiration_time_usec,
        )
        for fingerprint, key in login_profile.ssh_public_keys.items()
    }
    return AccountBinding(posix_accounts=accounts, ssh_public_keys=keys)
