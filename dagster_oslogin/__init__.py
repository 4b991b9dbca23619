"""
Dagster OS Login Integration.

Open SSH connections from Dagster to Google Cloud hosts with OS Login,
using short-lived keys instead of long-lived static ones:
- Ephemeral RSA key pairs imported for a service account
- Cached credentials, re-provisioned shortly before they expire
- Ready-to-run ssh/scp command lines from a Dagster resource
"""

# Core
from .keys.manager import EphemeralKeyManager
from .models import (
    AccountBinding,
    Credential,
    Identity,
    PosixAccount,
    SshKeyPair,
    SshPublicKeyInfo,
)
from .errors import (
    ConfigurationError,
    NoAccountError,
    NotInitializedError,
    OsLoginError,
    RegistryUnavailableError,
)

# Resources
from .resources.ssh import OsLoginSSHResource

# Collaborators (for advanced usage)
from .auth.os_login import OsLoginAuthProvider
from .credentials import (
    DefaultCredentialsProvider,
    ServiceAccountFileCredentialsProvider,
    ServiceAccountJsonCredentialsProvider,
)
from .keys.generator import RsaKeyPairGenerator
from .keys.registry import OsLoginKeyRegistry

__all__ = [
    # Main facade (most users only need this)
    "OsLoginSSHResource",
    # Core
    "EphemeralKeyManager",
    "Credential",
    "Identity",
    "SshKeyPair",
    "AccountBinding",
    "PosixAccount",
    "SshPublicKeyInfo",
    # Errors
    "OsLoginError",
    "ConfigurationError",
    "NoAccountError",
    "RegistryUnavailableError",
    "NotInitializedError",
    # Advanced: direct collaborator access
    "OsLoginAuthProvider",
    "DefaultCredentialsProvider",
    "ServiceAccountFileCredentialsProvider",
    "ServiceAccountJsonCredentialsProvider",
    "RsaKeyPairGenerator",
    "OsLoginKeyRegistry",
]
