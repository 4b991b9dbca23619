"""Providers that resolve the identity used to provision SSH keys."""

from .base import CLOUD_PLATFORM_SCOPE, IdentityCredentialsProvider
from .gcp import (
    DefaultCredentialsProvider,
    ServiceAccountFileCredentialsProvider,
    ServiceAccountJsonCredentialsProvider,
)

__all__ = [
    "CLOUD_PLATFORM_SCOPE",
    "IdentityCredentialsProvider",
    "DefaultCredentialsProvider",
    "ServiceAccountFileCredentialsProvider",
    "ServiceAccountJsonCredentialsProvider",
]
