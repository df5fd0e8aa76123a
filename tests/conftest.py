import base64
import hashlib
import hmac
import json

import pytest

SECRET = "shpss_test_secret"


def sign(raw_body: bytes, secret: str = SECRET) -> str:
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def order_body(**overrides) -> bytes:
    payload = {
        "order": {"order_number": "1001"},
        "customer": {"phone": "+966500000000"},
    }
    payload.update(overrides)
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


@pytest.fixture
def app_env(monkeypatch):
    """Minimal valid configuration in the environment."""
    env = {
        "SHOPIFY_WEBHOOK_SECRET": SECRET,
        "SMS_USERNAME": "store-user",
        "SMS_PASSWORD": "store-pass",
        "CHECK_CREDIT_URL": "https://sms.example.test/api/CheckCredit",
        "SMS_API_URL": "https://sms.example.test/api/SendSMS",
        "SMS_SENDER": "MyStore",
    }
    for name in ("SMS_SECRET_NAME", "QUOTA_MODE", "MAX_QUOTA", "HTTP_TIMEOUT_SECONDS",
                 "IDEMPOTENCY_TABLE", "APP_ENV", "STORE_PHONE", "SMS_LANGUAGE"):
        monkeypatch.delenv(name, raising=False)
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    return env
