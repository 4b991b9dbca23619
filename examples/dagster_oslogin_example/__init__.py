# ruff: noqa: E402
import warnings

import dagster as dg

warnings.filterwarnings("ignore", category=dg.PreviewWarning)

from dagster_oslogin_example.defs import remote_host as remote_host_defs
from dagster_oslogin_example.resources import get_resources_for_deployment


@dg.definitions
def defs():
    resource_defs = get_resources_for_deployment()

    all_assets = dg.load_assets_from_modules(
        [remote_host_defs],
        group_name="oslogin_example",
    )

    return dg.Definitions(
        assets=[*all_assets],
        resources=resource_defs,
    )
