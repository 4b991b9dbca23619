"""Tests for SSH key pair generation."""

import base64
import hashlib

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from dagster_oslogin.keys.generator import RsaKeyPairGenerator, compute_fingerprint


@pytest.fixture(scope="module")
def key_pair():
    return RsaKeyPairGenerator().generate("svc@proj.iam", 2048)


def test_public_key_is_openssh_line_with_principal(key_pair):
    algorithm, blob, comment = key_pair.public_key.split()
    assert algorithm == "ssh-rsa"
    assert comment == "svc@proj.iam"
    base64.b64decode(blob, validate=True)


def test_private_key_matches_public_key(key_pair):
    private = serialization.load_ssh_private_key(
        key_pair.private_key.encode(), password=None
    )
    assert isinstance(private, rsa.RSAPrivateKey)
    assert private.key_size == 2048

    public = serialization.load_ssh_public_key(key_pair.public_key.encode())
    assert public.public_numbers() == private.public_key().public_numbers()


def test_fingerprint_is_sha256_of_key_blob(key_pair):
    blob = base64.b64decode(key_pair.public_key.split()[1])
    assert key_pair.fingerprint == hashlib.sha256(blob).hexdigest()
    assert key_pair.fingerprint == compute_fingerprint(key_pair.public_key)


def test_fingerprint_ignores_comment(key_pair):
    algorithm, blob, _ = key_pair.public_key.split()
    assert compute_fingerprint(f"{algorithm} {blob} other@comment") == (
        key_pair.fingerprint
    )


def test_each_generation_yields_new_key():
    generator = RsaKeyPairGenerator()
    first = generator.generate("svc@proj.iam", 1024)
    second = generator.generate("svc@proj.iam", 1024)
    assert first.fingerprint != second.fingerprint


def test_empty_principal_omits_comment():
    key_pair = RsaKeyPairGenerator().generate("", 1024)
    assert len(key_pair.public_key.split()) == 2


def test_unsupported_key_size_is_rejected():
    with pytest.raises(ValueError):
        RsaKeyPairGenerator().generate("svc@proj.iam", 256)


@pytest.mark.parametrize("value", ["", "ssh-rsa", "ssh-rsa not*base64"])
def test_compute_fingerprint_rejects_malformed_keys(value):
    with pytest.raises(ValueError):
        compute_fingerprint(value)
