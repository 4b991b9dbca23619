"""Tests for the OS Login key registry."""

from types import SimpleNamespace

import pytest
from google.api_core.exceptions import ServiceUnavailable
from google.cloud import oslogin_v1

from dagster_oslogin import Identity, RegistryUnavailableError
from dagster_oslogin.keys.registry import OsLoginKeyRegistry, to_account_binding

NOW_S = 1_700_000_000.0


def make_login_profile(usernames=("svc_proj_iam",), keys=None):
    return SimpleNamespace(
        name="svc@proj.iam",
        posix_accounts=[
            SimpleNamespace(
                username=username,
                uid=1000 + i,
                gid=1000 + i,
                home_directory=f"/home/{username}",
                shell="/bin/bash",
                primary=i == 0,
                system_id="",
                account_id="proj",
            )
            for i, username in enumerate(usernames)
        ],
        ssh_public_keys=keys or {},
    )


class FakeOsLoginClient:
    instances: list["FakeOsLoginClient"] = []

    def __init__(self, credentials=None, client_options=None):
        self.credentials = credentials
        self.client_options = client_options
        self.requests = []
        self.timeouts = []
        self.closed = False
        self.response = SimpleNamespace(login_profile=make_login_profile())
        self.error = None
        FakeOsLoginClient.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.closed = True

    def import_ssh_public_key(self, request=None, timeout=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_client(monkeypatch):
    FakeOsLoginClient.instances = []
    monkeypatch.setattr(oslogin_v1, "OsLoginServiceClient", FakeOsLoginClient)
    return FakeOsLoginClient


def test_import_sends_absolute_expiry(fake_client):
    credentials = object()
    registry = OsLoginKeyRegistry(credentials, clock=lambda: NOW_S)

    binding = registry.import_public_key(
        "users/svc@proj.iam", "ssh-rsa AAAA svc@proj.iam", 600_000_000, "proj"
    )

    (client,) = fake_client.instances
    assert client.credentials is credentials
    assert client.client_options is None
    assert client.closed
    (request,) = client.requests
    assert request.parent == "users/svc@proj.iam"
    assert request.project_id == "proj"
    assert request.ssh_public_key.key == "ssh-rsa AAAA svc@proj.iam"
    assert request.ssh_public_key.expiration_time_usec == (
        1_700_000_000_000_000 + 600_000_000
    )
    assert client.timeouts == [None]
    assert [account.username for account in binding.posix_accounts] == [
        "svc_proj_iam"
    ]


def test_endpoint_and_timeout_are_forwarded(fake_client):
    registry = OsLoginKeyRegistry(
        object(), api_endpoint="oslogin.example.com", timeout=5.0
    )

    registry.import_public_key("users/a@b", "ssh-rsa AAAA", 1_000, "proj")

    (client,) = fake_client.instances
    assert client.client_options.api_endpoint == "oslogin.example.com"
    assert client.timeouts == [5.0]


def test_from_identity_uses_identity_credentials():
    credentials = object()
    identity = Identity("svc@proj.iam", "proj", credentials)

    registry = OsLoginKeyRegistry.from_identity(identity, timeout=3.0)

    assert registry.credentials is credentials
    assert registry.timeout == 3.0
    assert registry.api_endpoint is None


def test_api_errors_become_registry_unavailable(fake_client, monkeypatch):
    error = ServiceUnavailable("backend unavailable")

    class FailingClient(FakeOsLoginClient):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self.error = error

    monkeypatch.setattr(oslogin_v1, "OsLoginServiceClient", FailingClient)
    registry = OsLoginKeyRegistry(object())

    with pytest.raises(RegistryUnavailableError, match="users/a@b") as excinfo:
        registry.import_public_key("users/a@b", "ssh-rsa AAAA", 1_000, "proj")

    assert excinfo.value.__cause__ is error
    assert fake_client.instances[-1].closed


def test_login_profile_conversion_keeps_order_and_key_metadata():
    profile = make_login_profile(
        usernames=("first", "second"),
        keys={
            "abc123": SimpleNamespace(
                key="ssh-rsa AAAA", fingerprint="abc123", expiration_time_usec=42
            ),
            "def456": SimpleNamespace(
                key="ssh-rsa BBBB", fingerprint="", expiration_time_usec=0
            ),
        },
    )

    binding = to_account_binding(profile)

    assert [account.username for account in binding.posix_accounts] == [
        "first",
        "second",
    ]
    assert binding.posix_accounts[0].primary
    assert binding.posix_accounts[1].home_directory == "/home/second"
    assert binding.key_info("abc123").expiration_time_usec == 42
    assert binding.key_info("def456").fingerprint == "def456"
    assert binding.key_info("missing") is None


def test_empty_login_profile():
    binding = to_account_binding(make_login_profile(usernames=()))
    assert binding.posix_accounts == ()
    assert dict(binding.ssh_public_keys) == {}
