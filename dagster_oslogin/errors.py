"""Exceptions raised while provisioning OS Login SSH credentials."""


class OsLoginError(Exception):
    """Base class for all errors raised by dagster-oslogin."""


class ConfigurationError(OsLoginError):
    """Credentials or the registry client could not be set up.

    Not retryable: build a new key manager with corrected settings.
    """


class NoAccountError(OsLoginError):
    """The identity has no POSIX account bound in the directory."""


class RegistryUnavailableError(OsLoginError):
    """Importing a public key failed due to a transport or service error.

    The caller decides whether to retry.
    """


class NotInitializedError(OsLoginError):
    """``refresh`` was called before ``init``."""
