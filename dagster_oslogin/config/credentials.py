from enum import StrEnum


class CredentialSource(StrEnum):
    """Where the OS Login identity's credentials come from.
    Members of this enum behave like strings.
    """

    APPLICATION_DEFAULT = "application-default"
    SERVICE_ACCOUNT_FILE = "service-account-file"
    SERVICE_ACCOUNT_JSON = "service-account-json"
