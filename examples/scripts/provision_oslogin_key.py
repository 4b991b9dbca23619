import argparse
import os
import time
from datetime import datetime, timezone

from dagster_oslogin import (
    DefaultCredentialsProvider,
    EphemeralKeyManager,
    OsLoginAuthProvider,
    ServiceAccountFileCredentialsProvider,
)


def _get_env(name: str, required: bool = True) -> str | None:
    value = os.getenv(name)
    if required and not value:
        raise RuntimeError(f"Missing required env var: {name}")
    return value


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Provision a short-lived OS Login SSH key for a service account."
    )
    parser.add_argument(
        "--ttl-seconds",
        type=int,
        default=int(os.getenv("OSLOGIN_SSH_KEY_TTL_S", "600")),
        help="Requested key lifetime in seconds.",
    )
    parser.add_argument(
        "--key-size",
        type=int,
        default=int(os.getenv("OSLOGIN_SSH_KEY_SIZE", "2048")),
        help="RSA key size in bits.",
    )
    parser.add_argument(
        "--key-path",
        default=os.getenv("OSLOGIN_SSH_KEY_PATH", "~/.ssh/id_oslogin"),
        help="Where to write the private key (public key goes to <path>.pub).",
    )
    args = parser.parse_args()

    project_id = _get_env("OSLOGIN_SSH_PROJECT_ID", required=False)
    credentials_file = _get_env("OSLOGIN_SSH_CREDENTIALS_FILE", required=False)
    if credentials_file:
        credentials_provider = ServiceAccountFileCredentialsProvider(
            credentials_file, project_id=project_id
        )
    else:
        credentials_provider = DefaultCredentialsProvider(project_id=project_id)

    print(f"Using credentials: {credentials_provider.info()}")
    manager = EphemeralKeyManager(credentials_provider).init()
    provider = OsLoginAuthProvider(
        manager=manager,
        key_path=os.path.expanduser(args.key_path),
        ttl_ms=args.ttl_seconds * 1_000,
        key_size=args.key_size,
    )
    provider.ensure()

    credential = provider.credential
    expires_at = datetime.fromtimestamp(
        credential.expiration_time_ms / 1_000, tz=timezone.utc
    )
    remaining = credential.expiration_time_ms / 1_000 - time.time()
    print(f"Login user: {credential.username}")
    print(f"Key written to: {provider.key_path}")
    print(f"Key valid until: {expires_at.isoformat()} ({remaining:.0f}s remaining)")

    host = _get_env("OSLOGIN_SSH_HOST", required=False)
    if host:
        print(f"Connect with: ssh -i {provider.key_path} {credential.username}@{host}")


if __name__ == "__main__":
    main()
