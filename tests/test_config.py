import json

import pytest
from botocore.exceptions import ClientError

from src.utils import config as config_module
from src.utils.config import load_settings
from src.utils.secrets import get_app_secrets


def test_load_settings_defaults(app_env):
    settings = load_settings()
    assert settings.shopify_webhook_secret == app_env["SHOPIFY_WEBHOOK_SECRET"]
    assert settings.sms_language == "ar"
    assert settings.quota_mode == "credit"
    assert settings.max_quota == 10
    assert settings.http_timeout_seconds == 10.0
    assert settings.idempotency_table is None
    assert settings.debug is False


def test_load_settings_reports_every_missing_variable(app_env, monkeypatch):
    monkeypatch.delenv("SMS_USERNAME")
    monkeypatch.delenv("SMS_API_URL")
    with pytest.raises(RuntimeError) as exc:
        load_settings()
    assert "SMS_USERNAME" in str(exc.value)
    assert "SMS_API_URL" in str(exc.value)


@pytest.mark.parametrize("name,value", [
    ("QUOTA_MODE", "unlimited"),
    ("HTTP_TIMEOUT_SECONDS", "soon"),
    ("HTTP_TIMEOUT_SECONDS", "0"),
    ("MAX_QUOTA", "-1"),
])
def test_load_settings_rejects_invalid_values(app_env, monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(RuntimeError, match=name):
        load_settings()


def test_session_mode_and_development_env(app_env, monkeypatch):
    monkeypatch.setenv("QUOTA_MODE", "Session")
    monkeypatch.setenv("MAX_QUOTA", "3")
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("IDEMPOTENCY_TABLE", "webhook-ids")
    settings = load_settings()
    assert settings.quota_mode == "session"
    assert settings.max_quota == 3
    assert settings.debug is True
    assert settings.idempotency_table == "webhook-ids"


def test_secret_values_override_environment(app_env, monkeypatch):
    monkeypatch.setenv("SMS_SECRET_NAME", "shopify-sms/prod")
    monkeypatch.delenv("SMS_PASSWORD")

    def fake_get_app_secrets(secret_name, region_name=None):
        assert secret_name == "shopify-sms/prod"
        return {"sms_password": "from-secrets", "shopify_webhook_secret": "rotated"}

    monkeypatch.setattr(config_module, "get_app_secrets", fake_get_app_secrets)
    settings = load_settings()
    assert settings.sms_password == "from-secrets"
    assert settings.shopify_webhook_secret == "rotated"
    assert settings.sms_username == app_env["SMS_USERNAME"]


class StubSecretsManager:
    def __init__(self, secret_string=None, error=None):
        self.secret_string = secret_string
        self.error = error

    def get_secret_value(self, SecretId):
        if self.error:
            raise self.error
        return {"SecretString": self.secret_string}


def _fake_boto3(stub):
    class FakeBoto3:
        def client(self, name, region_name=None):
            assert name == "secretsmanager"
            return stub
    return FakeBoto3()


def test_get_app_secrets_parses_json(monkeypatch):
    stub = StubSecretsManager(json.dumps({"sms_username": "u"}))
    monkeypatch.setattr("src.utils.secrets.boto3", _fake_boto3(stub))
    assert get_app_secrets("shopify-sms/prod", "me-south-1") == {"sms_username": "u"}


@pytest.mark.parametrize("stub", [
    StubSecretsManager(""),
    StubSecretsManager("{not json"),
    StubSecretsManager('["a list"]'),
    StubSecretsManager(error=ClientError({"Error": {"Code": "AccessDeniedException", "Message": "no"}}, "GetSecretValue")),
])
def test_get_app_secrets_failures_are_runtime_errors(monkeypatch, stub):
    monkeypatch.setattr("src.utils.secrets.boto3", _fake_boto3(stub))
    with pytest.raises(RuntimeError):
        get_app_secrets("shopify-sms/prod")
