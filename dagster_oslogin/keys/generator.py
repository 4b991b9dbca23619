"""SSH key pair generation."""

from __future__ import annotations

import base64
import hashlib
from typing import Protocol

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..models import SshKeyPair


class KeyPairGenerator(Protocol):
    """Creates a fresh SSH key pair for a principal."""

    def generate(self, principal: str, key_size: int) -> SshKeyPair: ...


def compute_fingerprint(public_key: str) -> str:
    """Hex SHA-256 digest of an OpenSSH public key blob.

    Args:
        public_key: Public key line such as ``ssh-rsa AAAA... comment``

    Raises:
        ValueError: If the line has no base64 key blob

    """
    parts = public_key.split()
    if len(parts) < 2:
        raise ValueError(f"Not an OpenSSH public key: {public_key!r}")
    blob = base64.b64decode(parts[1], validate=True)
    return hashlib.sha256(blob).hexdigest()


class RsaKeyPairGenerator:
    """RSA key pairs in OpenSSH format.

    The key size is passed to ``cryptography`` unchanged; sizes it does not
    accept raise ``ValueError``.
    """

    public_exponent = 65537

    def generate(self, principal: str, key_size: int) -> SshKeyPair:
        private = rsa.generate_private_key(
            public_exponent=self.public_exponent, key_size=key_size
        )
        private_pem = private.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.OpenSSH,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode("ascii")
        public_line = (
            private.public_key()
            .public_bytes(
                encoding=serialization.Encoding.OpenSSH,
                format=serialization.PublicFormat.OpenSSH,
            )
            .decode("ascii")
        )
        if principal:
            public_line = f"{public_line} {principal}"
        return SshKeyPair(
            public_key=public_line,
            private_key=private_pem,
            fingerprint=compute_fingerprint(public_line),
        )
