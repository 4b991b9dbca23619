"""Ephemeral SSH key provisioning with OS Login."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Callable, Optional

from dagster import get_dagster_logger
from google.auth.exceptions import GoogleAuthError

from ..errors import (
    ConfigurationError,
    NoAccountError,
    NotInitializedError,
    RegistryUnavailableError,
)
from ..models import Credential, Identity
from .generator import KeyPairGenerator, RsaKeyPairGenerator
from .registry import OsLoginKeyRegistry, RemoteKeyRegistry

if TYPE_CHECKING:
    from ..credentials.base import IdentityCredentialsProvider


class EphemeralKeyManager:
    """Provisions short-lived SSH keys for a service identity and caches the latest one.

    A new key pair is generated and imported whenever there is no cached
    credential or the cached one expires within ``REFRESH_MARGIN_MS``.
    Concurrent callers that find the credential stale wait for a single
    provisioning round instead of each importing their own key.

    Examples:
        .. code-block:: python

            manager = EphemeralKeyManager(
                ServiceAccountFileCredentialsProvider("~/keys/svc.json")
            ).init()
            credential = manager.refresh(ttl_ms=600_000, key_size=2048)
            print(credential.username, credential.expiration_time_ms)

    """

    # keep the key valid for at least one more network round trip
    REFRESH_MARGIN_MS = 1_000

    def __init__(
        self,
        credentials_provider: "IdentityCredentialsProvider",
        key_generator: Optional[KeyPairGenerator] = None,
        registry_factory: Optional[Callable[[Identity], RemoteKeyRegistry]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.credentials_provider = credentials_provider
        self.key_generator = key_generator or RsaKeyPairGenerator()
        self.registry_factory = registry_factory or OsLoginKeyRegistry.from_identity
        self._clock = clock
        self._identity: Optional[Identity] = None
        self._registry: Optional[RemoteKeyRegistry] = None
        self._credential: Optional[Credential] = None
        self._lock = threading.Lock()
        self.logger = get_dagster_logger()

    @property
    def initialized(self) -> bool:
        return self._registry is not None

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def principal(self) -> Optional[str]:
        return self._identity.principal if self._identity else None

    @property
    def current(self) -> Optional[Credential]:
        """Last provisioned credential, without refreshing it."""
        return self._credential

    def init(self) -> "EphemeralKeyManager":
        """Resolve the identity and build the registry client.

        Returns:
            The manager itself, for chaining

        Raises:
            ConfigurationError: If credentials cannot be resolved or the
                registry client cannot be built

        """
        try:
            identity = self.credentials_provider.create()
            registry = self.registry_factory(identity)
        except (OSError, ValueError, GoogleAuthError) as e:
            raise ConfigurationError(
                f"Cannot initialize for {self.credentials_provider.info()}"
            ) from e

        self._identity = identity
        self._registry = registry
        self.logger.debug(f"Key manager initialized for {identity.principal}")
        return self

    def refresh(self, ttl_ms: int, key_size: int) -> Credential:
        """Return a credential valid for at least another second.

        Args:
            ttl_ms: Lifetime requested for a newly provisioned key, in ms
            key_size: Key size in bits for a newly generated key pair

        Raises:
            NotInitializedError: If ``init`` has not completed
            NoAccountError: If the identity has no POSIX account
            RegistryUnavailableError: If the key import fails

        """
        if self._identity is None or self._registry is None:
            raise NotInitializedError("Key manager used before init()")

        with self._lock:
            credential = self._credential
            if credential is None or credential.expires_within(
                self.REFRESH_MARGIN_MS, self._now_ms()
            ):
                credential = self._provision(
                    self._identity, self._registry, ttl_ms, key_size
                )
                self._credential = credential
            return credential

    def _provision(
        self,
        identity: Identity,
        registry: RemoteKeyRegistry,
        ttl_ms: int,
        key_size: int,
    ) -> Credential:
        key_pair = self.key_generator.generate(identity.client_email, key_size)
        expiration_time_ms = self._now_ms() + ttl_ms
        try:
            binding = registry.import_public_key(
                identity.principal,
                key_pair.public_key,
                ttl_ms * 1_000,
                identity.project_id,
            )
        except OSError as e:
            raise RegistryUnavailableError(
                f"Cannot import SSH key for {identity.principal}"
            ) from e

        if not binding.posix_accounts:
            raise NoAccountError(
                f"Cannot get account for {self.credentials_provider.info()}: "
                f"{identity.client_email} has no posix account"
            )
        account = binding.posix_accounts[0]

        key_info = binding.key_info(key_pair.fingerprint)
        if key_info is not None and key_info.expiration_time_usec:
            expiration_time_ms = key_info.expiration_time_usec // 1_000

        self.logger.debug(
            f"Using new key pair for user {account.username}, "
            f"it expires at {expiration_time_ms} ms"
        )
        return Credential(
            key_pair=key_pair,
            username=account.username,
            expiration_time_ms=expiration_time_ms,
        )

    def _now_ms(self) -> int:
        return round(self._clock() * 1_000)
