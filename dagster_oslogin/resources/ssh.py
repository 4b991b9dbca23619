"""SSH connection resource authenticated with ephemeral OS Login keys."""

import os
import tempfile
import threading
from typing import Any, List, Optional

from dagster import ConfigurableResource
from pydantic import Field, PrivateAttr, model_validator

from ..auth.os_login import OsLoginAuthProvider
from ..config.credentials import CredentialSource
from ..credentials import (
    DefaultCredentialsProvider,
    IdentityCredentialsProvider,
    ServiceAccountFileCredentialsProvider,
    ServiceAccountJsonCredentialsProvider,
)
from ..keys.manager import EphemeralKeyManager
from ..keys.registry import OsLoginKeyRegistry
from ..models import Credential


class OsLoginSSHResource(ConfigurableResource):
    """SSH connection settings for hosts with OS Login enabled.

    Instead of a static key, a short-lived key pair is generated and
    imported into OS Login for the configured service account. The key is
    re-provisioned transparently when it is about to expire.

    Credentials are taken from (at most one of):
    1. A service account key file (``credentials_file``)
    2. A service account key JSON string (``credentials_json``)
    3. Application Default Credentials (neither set)

    Examples:
        .. code-block:: python

            ssh = OsLoginSSHResource(
                host="10.0.0.12",
                credentials_file="~/keys/dagster-runner.json",
            )

        .. code-block:: python

            # From environment variables
            ssh = OsLoginSSHResource.from_env()

    """

    host: str = Field(description="SSH hostname or IP address")
    port: int = Field(default=22, description="SSH port")

    project_id: Optional[str] = Field(
        default=None,
        description="Project to import keys into (default: the credentials' project)",
    )
    credentials_file: Optional[str] = Field(
        default=None, description="Path to a service account key file"
    )
    credentials_json: Optional[str] = Field(
        default=None, description="Service account key as a JSON string"
    )
    api_endpoint: Optional[str] = Field(
        default=None, description="Override for the OS Login API endpoint"
    )

    key_ttl_ms: int = Field(
        default=600_000, description="Lifetime of provisioned keys in milliseconds"
    )
    key_size: int = Field(default=2048, description="RSA key size in bits")
    request_timeout: Optional[float] = Field(
        default=None, description="Timeout in seconds for OS Login API calls"
    )
    key_path: Optional[str] = Field(
        default=None,
        description="Private key path for ssh (default: a private temp dir)",
    )

    extra_opts: List[str] = Field(
        default_factory=list,
        description="Additional SSH options (e.g., ['-o', 'Compression=yes'])",
    )

    _key_manager: Optional[EphemeralKeyManager] = PrivateAttr(default=None)
    _auth_provider: Optional[OsLoginAuthProvider] = PrivateAttr(default=None)
    _key_dir: Optional[str] = PrivateAttr(default=None)
    _lock: Any = PrivateAttr(default_factory=threading.Lock)

    @model_validator(mode="after")
    def validate_credentials(self):
        """Ensure at most one explicit credential source and sane key settings."""
        if self.credentials_file is not None and self.credentials_json is not None:
            raise ValueError(
                "Cannot specify both 'credentials_file' and 'credentials_json'. "
                "Choose one credential source."
            )
        if self.key_ttl_ms <= 0:
            raise ValueError("'key_ttl_ms' must be positive")
        if self.key_size <= 0:
            raise ValueError("'key_size' must be positive")
        return self

    @property
    def credential_source(self) -> CredentialSource:
        if self.credentials_file is not None:
            return CredentialSource.SERVICE_ACCOUNT_FILE
        if self.credentials_json is not None:
            return CredentialSource.SERVICE_ACCOUNT_JSON
        return CredentialSource.APPLICATION_DEFAULT

    @property
    def resolved_key_path(self) -> str:
        if self.key_path:
            return os.path.expanduser(self.key_path)
        if self._key_dir is None:
            # mkdtemp creates the directory with mode 0700 under a random name
            self._key_dir = tempfile.mkdtemp(prefix=f"dagster-oslogin-{self.host}-")
        return os.path.join(self._key_dir, "id_oslogin")

    @classmethod
    def from_env(cls, prefix: str = "OSLOGIN_SSH") -> "OsLoginSSHResource":
        """Create from environment variables.

        Environment variables:
            ``{prefix}``_HOST - SSH hostname (required)
            ``{prefix}``_PORT - SSH port (optional, default: 22)
            ``{prefix}``_PROJECT_ID - Project id (optional)
            ``{prefix}``_CREDENTIALS_FILE - Service account key file (optional)
            ``{prefix}``_CREDENTIALS_JSON - Service account key JSON (optional)
            ``{prefix}``_API_ENDPOINT - OS Login endpoint override (optional)
            ``{prefix}``_KEY_TTL_MS - Key lifetime in ms (optional, default: 600000)
            ``{prefix}``_KEY_SIZE - RSA key size (optional, default: 2048)
            ``{prefix}``_REQUEST_TIMEOUT - API timeout in seconds (optional)
            ``{prefix}``_KEY_PATH - Private key output path (optional)
            ``{prefix}``_OPTS_EXTRA - Additional SSH options (optional)

        Raises:
            ValueError: If HOST is missing or both credential sources are set

        Example:

        .. code-block:: bash

            export OSLOGIN_SSH_HOST=10.0.0.12
            export OSLOGIN_SSH_CREDENTIALS_FILE=~/keys/dagster-runner.json

        """
        import shlex

        host = os.getenv(f"{prefix}_HOST")
        if not host:
            raise ValueError(f"{prefix}_HOST environment variable is required")

        timeout = os.getenv(f"{prefix}_REQUEST_TIMEOUT")

        return cls(
            host=host,
            port=int(os.getenv(f"{prefix}_PORT", "22")),
            project_id=os.getenv(f"{prefix}_PROJECT_ID"),
            credentials_file=os.getenv(f"{prefix}_CREDENTIALS_FILE"),
            credentials_json=os.getenv(f"{prefix}_CREDENTIALS_JSON"),
            api_endpoint=os.getenv(f"{prefix}_API_ENDPOINT"),
            key_ttl_ms=int(os.getenv(f"{prefix}_KEY_TTL_MS", "600000")),
            key_size=int(os.getenv(f"{prefix}_KEY_SIZE", "2048")),
            request_timeout=float(timeout) if timeout else None,
            key_path=os.getenv(f"{prefix}_KEY_PATH"),
            extra_opts=shlex.split(os.getenv(f"{prefix}_OPTS_EXTRA", "")),
        )

    def build_credentials_provider(self) -> IdentityCredentialsProvider:
        source = self.credential_source
        if source == CredentialSource.SERVICE_ACCOUNT_FILE:
            return ServiceAccountFileCredentialsProvider(
                self.credentials_file,  # type: ignore
                project_id=self.project_id,
            )
        if source == CredentialSource.SERVICE_ACCOUNT_JSON:
            return ServiceAccountJsonCredentialsProvider(
                self.credentials_json,  # type: ignore
                project_id=self.project_id,
            )
        return DefaultCredentialsProvider(project_id=self.project_id)

    def build_key_manager(self) -> EphemeralKeyManager:
        """Create an uninitialized key manager for these settings."""

        def registry_factory(identity):
            return OsLoginKeyRegistry.from_identity(
                identity,
                api_endpoint=self.api_endpoint,
                timeout=self.request_timeout,
            )

        return EphemeralKeyManager(
            self.build_credentials_provider(), registry_factory=registry_factory
        )

    def get_key_manager(self) -> EphemeralKeyManager:
        """Return the shared key manager, initializing it on first use.

        Raises:
            ConfigurationError: If the credentials cannot be resolved

        """
        with self._lock:
            if self._key_manager is None:
                self._key_manager = self.build_key_manager().init()
            return self._key_manager

    def get_auth_provider(self) -> OsLoginAuthProvider:
        manager = self.get_key_manager()
        with self._lock:
            if self._auth_provider is None:
                self._auth_provider = OsLoginAuthProvider(
                    manager=manager,
                    key_path=self.resolved_key_path,
                    ttl_ms=self.key_ttl_ms,
                    key_size=self.key_size,
                )
            return self._auth_provider

    def ensure_credential(self) -> Credential:
        """Provision or reuse a key and make sure it is written to ``key_path``."""
        provider = self.get_auth_provider()
        with self._lock:
            provider.ensure()
            return provider.credential  # type: ignore

    def get_ssh_base_command(self) -> List[str]:
        """Build base SSH command for subprocess.

        Refreshes the OS Login key first, so the returned command is usable
        for at least as long as the key's remaining lifetime.

        Example:
            ['ssh', '-p', '22', '-i', '/tmp/dagster-oslogin-.../id_oslogin', ...]

        """
        credential = self.ensure_credential()
        return [
            "ssh",
            "-p",
            str(self.port),
            "-i",
            self.resolved_key_path,
            "-o",
            "IdentitiesOnly=yes",
            "-o",
            "PreferredAuthentications=publickey",
            "-o",
            "PasswordAuthentication=no",
            "-o",
            "BatchMode=yes",
            *self._base_opts(),
            "-o",
            "ServerAliveInterval=30",
            "-o",
            "ServerAliveCountMax=6",
            *self.extra_opts,
            f"{credential.username}@{self.host}",
        ]

    def get_scp_base_command(self) -> List[str]:
        """Build base SCP command for file transfers (without source/dest)."""
        self.ensure_credential()
        return [
            "scp",
            "-P",
            str(self.port),
            "-i",
            self.resolved_key_path,
            "-o",
            "IdentitiesOnly=yes",
            "-o",
            "BatchMode=yes",
            *self._base_opts(),
            *self.extra_opts,
        ]

    def get_remote_target(self) -> str:
        """Get the remote target string for SCP commands, e.g. 'sa_123@10.0.0.12'."""
        credential = self.ensure_credential()
        return f"{credential.username}@{self.host}"

    @staticmethod
    def _base_opts() -> List[str]:
        return [
            "-o",
            "StrictHostKeyChecking=no",
            "-o",
            "UserKnownHostsFile=/dev/null",
            "-o",
            "LogLevel=ERROR",
        ]
