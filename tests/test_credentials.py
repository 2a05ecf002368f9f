"""Tests for credential resolution from the environment."""

import pytest

from tc_info_exporter.credentials import resolve_credentials
from tc_info_exporter.errors import CredentialError


def test_resolves_id_and_key():
    cred = resolve_credentials({
        "TENCENTCLOUD_SECRET_ID": "AKIDexample",
        "TENCENTCLOUD_SECRET_KEY": "secretexample",
    })
    assert cred.secret_id == "AKIDexample"
    assert cred.secret_key == "secretexample"
    assert not cred.token


def test_session_token_is_optional():
    cred = resolve_credentials({
        "TENCENTCLOUD_SECRET_ID": "AKIDexample",
        "TENCENTCLOUD_SECRET_KEY": "secretexample",
        "TENCENTCLOUD_SESSION_TOKEN": "tok",
    })
    assert cred.token == "tok"


def test_missing_secret_key_is_fatal():
    with pytest.raises(CredentialError, match="TENCENTCLOUD_SECRET_KEY"):
        resolve_credentials({"TENCENTCLOUD_SECRET_ID": "AKIDexample"})


def test_empty_secret_id_is_fatal():
    with pytest.raises(CredentialError, match="TENCENTCLOUD_SECRET_ID"):
        resolve_credentials({"TENCENTCLOUD_SECRET_ID": "", "TENCENTCLOUD_SECRET_KEY": "k"})


def test_whitespace_is_malformed_and_not_echoed():
    with pytest.raises(CredentialError) as excinfo:
        resolve_credentials({
            "TENCENTCLOUD_SECRET_ID": "AKIDexample",
            "TENCENTCLOUD_SECRET_KEY": " leaked-secret ",
        })
    assert "leaked-secret" not in str(excinfo.value)


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("TENCENTCLOUD_SECRET_ID", "AKIDfromenv")
    monkeypatch.setenv("TENCENTCLOUD_SECRET_KEY", "keyfromenv")
    monkeypatch.delenv("TENCENTCLOUD_SESSION_TOKEN", raising=False)
    assert resolve_credentials().secret_id == "AKIDfromenv"
