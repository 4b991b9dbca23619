import subprocess

import dagster as dg

from dagster_oslogin import OsLoginSSHResource


@dg.asset
def remote_host_info(
    context: dg.AssetExecutionContext, ssh: OsLoginSSHResource
) -> dg.MaterializeResult:
    """Log in with an ephemeral OS Login key and record basic host facts."""
    cmd = [
        *ssh.get_ssh_base_command(),
        "bash --noprofile --norc -c 'hostname; uname -r'",
    ]
    context.log.debug(f"Running {cmd}")
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    if result.returncode != 0:
        raise RuntimeError(
            f"ssh failed (exit {result.returncode})\nstderr:\n{result.stderr}"
        )
    hostname, kernel = (result.stdout.strip().splitlines() + ["", ""])[:2]
    credential = ssh.ensure_credential()
    return dg.MaterializeResult(
        metadata={
            "hostname": hostname,
            "kernel": kernel,
            "login_user": credential.username,
            "key_expires_at_ms": credential.expiration_time_ms,
        }
    )
