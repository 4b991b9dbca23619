"""Pytest configuration and fixtures."""

import pytest

from dagster_oslogin import EphemeralKeyManager

from .fakes import FakeClock, FakeCredentialsProvider, FakeKeyGenerator, FakeRegistry


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def credentials_provider():
    return FakeCredentialsProvider()


@pytest.fixture
def key_generator():
    return FakeKeyGenerator()


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def manager(credentials_provider, key_generator, registry, clock):
    """Initialized key manager wired to the fakes."""
    return EphemeralKeyManager(
        credentials_provider,
        key_generator=key_generator,
        registry_factory=lambda identity: registry,
        clock=clock,
    ).init()
