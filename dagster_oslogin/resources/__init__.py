"""Dagster resources for OS Login SSH access."""

from .ssh import OsLoginSSHResource

__all__ = [
    "OsLoginSSHResource",
]
