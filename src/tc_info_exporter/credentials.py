"""
Credential resolution.

Credentials are read from the process environment exactly once, at
startup, and handed to every collector explicitly. Nothing downstream
looks them up again.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from tencentcloud.common.credential import Credential
from tencentcloud.common.exception.tencent_cloud_sdk_exception import TencentCloudSDKException

from tc_info_exporter.errors import CredentialError

log = logging.getLogger(__name__)

SECRET_ID_VAR = "TENCENTCLOUD_SECRET_ID"
SECRET_KEY_VAR = "TENCENTCLOUD_SECRET_KEY"
SESSION_TOKEN_VAR = "TENCENTCLOUD_SESSION_TOKEN"


def _read(environ: Mapping[str, str], name: str, required: bool = True) -> Optional[str]:
    value = environ.get(name)
    if value is None or value == "":
        if required:
            raise CredentialError(f"{name} is not set")
        return None
    if value.strip() != value or any(ch.isspace() for ch in value):
        raise CredentialError(f"{name} must not contain whitespace")
    return value


# Not the SDK's EnvironmentVariableCredential: it ignores the session token
# and returns None without saying which variable is wrong.
def resolve_credentials(environ: Optional[Mapping[str, str]] = None) -> Credential:
    """Build SDK credentials from the environment or raise CredentialError.

    The error message names the offending variable, never its value.
    """
    environ = os.environ if environ is None else environ

    secret_id = _read(environ, SECRET_ID_VAR)
    secret_key = _read(environ, SECRET_KEY_VAR)
    token = _read(environ, SESSION_TOKEN_VAR, required=False)

    try:
        credentials = Credential(secret_id, secret_key, token)
    except TencentCloudSDKException as e:
        raise CredentialError(f"invalid credentials: {e.get_message()}") from e

    log.debug("Resolved credentials from %s (session token: %s)",
              SECRET_ID_VAR, "yes" if token else "no")
    return credentials


def mock_credentials() -> Credential:
    """Placeholder credentials for --mock mode, never sent anywhere."""
    return Credential("mock-secret-id", "mock-secret-key")
