import os

import dagster as dg

from dagster_oslogin import OsLoginSSHResource

# OS Login keys are imported for a service account, so plain user ADC from
# `gcloud auth application-default login` is rejected at init. For dev,
# either point OSLOGIN_SSH_CREDENTIALS_FILE at a service account key or log
# in with `gcloud auth application-default login
# --impersonate-service-account=<sa-email>` and leave it unset.
RESOURCES_DEV = {
    "ssh": OsLoginSSHResource(
        host=dg.EnvVar("OSLOGIN_SSH_HOST").get_value("localhost"),
        project_id=dg.EnvVar("OSLOGIN_SSH_PROJECT_ID").get_value(),
        credentials_file=dg.EnvVar("OSLOGIN_SSH_CREDENTIALS_FILE").get_value(),
        key_ttl_ms=300_000,
    ),
}

RESOURCES_PROD = {
    "ssh": OsLoginSSHResource(
        host=dg.EnvVar("OSLOGIN_SSH_HOST"),
        credentials_file=dg.EnvVar("OSLOGIN_SSH_CREDENTIALS_FILE"),
        key_size=4096,
    ),
}

resource_defs_by_deployment_name = {
    "dev": RESOURCES_DEV,
    "prod": RESOURCES_PROD,
}


def get_dagster_deployment_environment(
    deployment_key: str = "DAGSTER_DEPLOYMENT", default_value="dev"
):
    deployment = os.environ.get(deployment_key, default_value)
    dg.get_dagster_logger().debug(f"dagster deployment environment: {deployment}")
    return deployment


def get_resources_for_deployment(log_env: bool = True):
    deployment_name = get_dagster_deployment_environment()
    resources = resource_defs_by_deployment_name[deployment_name]
    if log_env:
        dg.get_dagster_logger().info(f"Using deployment of: {deployment_name}")
    return resources
