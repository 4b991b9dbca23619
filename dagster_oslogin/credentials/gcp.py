"""Credential providers backed by google-auth."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Optional

import google.auth
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from ..models import Identity
from .base import CLOUD_PLATFORM_SCOPE


def _build_identity(credentials, project_id: Optional[str], source: str) -> Identity:
    email = getattr(credentials, "service_account_email", None)
    if not email or email == "default":
        raise ValueError(
            f"No service account email available from {source}; user credentials "
            "need --impersonate-service-account"
        )
    if not project_id:
        raise ValueError(f"No project id available from {source}")
    return Identity(client_email=email, project_id=project_id, credentials=credentials)


@dataclass
class DefaultCredentialsProvider:
    """Application Default Credentials (env var, gcloud, or metadata server)."""

    project_id: Optional[str] = None
    scopes: list[str] = field(default_factory=lambda: [CLOUD_PLATFORM_SCOPE])

    def create(self) -> Identity:
        credentials, default_project = google.auth.default(scopes=self.scopes)
        # Compute Engine credentials only learn their email after a refresh
        if getattr(credentials, "service_account_email", None) == "default":
            credentials.refresh(Request())
        return _build_identity(
            credentials, self.project_id or default_project, self.info()
        )

    def info(self) -> str:
        if self.project_id:
            return f"application default credentials (project {self.project_id})"
        return "application default credentials"


@dataclass
class ServiceAccountFileCredentialsProvider:
    """Service account key loaded from a JSON key file."""

    path: str
    project_id: Optional[str] = None
    scopes: list[str] = field(default_factory=lambda: [CLOUD_PLATFORM_SCOPE])

    def create(self) -> Identity:
        credentials = service_account.Credentials.from_service_account_file(
            os.path.expanduser(self.path), scopes=self.scopes
        )
        return _build_identity(
            credentials, self.project_id or credentials.project_id, self.info()
        )

    def info(self) -> str:
        return f"service account key file {self.path}"


@dataclass
class ServiceAccountJsonCredentialsProvider:
    """Service account key given inline as a JSON document."""

    info_json: str = field(repr=False)
    project_id: Optional[str] = None
    scopes: list[str] = field(default_factory=lambda: [CLOUD_PLATFORM_SCOPE])

    def create(self) -> Identity:
        # json.JSONDecodeError is a ValueError
        account_info = json.loads(self.info_json)
        credentials = service_account.Credentials.from_service_account_info(
            account_info, scopes=self.scopes
        )
        return _build_identity(
            credentials, self.project_id or credentials.project_id, self.info()
        )

    def info(self) -> str:
        return "service account key JSON"
