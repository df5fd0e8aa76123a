import os
from dataclasses import dataclass
from typing import Dict, Optional

from src.utils.logger import get_logger
from src.utils.secrets import get_app_secrets

logger = get_logger("config")

QUOTA_MODES = ("credit", "session")
DEVELOPMENT_ENVS = ("development", "dev", "local")

# Secret-backed settings: secret key -> environment variable
_SECRET_KEYS = {
    "shopify_webhook_secret": "SHOPIFY_WEBHOOK_SECRET",
    "sms_username": "SMS_USERNAME",
    "sms_password": "SMS_PASSWORD",
}


@dataclass(frozen=True)
class Settings:
    shopify_webhook_secret: str
    sms_username: str
    sms_password: str
    check_credit_url: str
    sms_api_url: str
    sms_sender: str
    store_phone: str = ""
    sms_language: str = "ar"
    http_timeout_seconds: float = 10.0
    quota_mode: str = "credit"
    max_quota: int = 10
    idempotency_table: Optional[str] = None
    app_env: str = "production"

    @property
    def debug(self) -> bool:
        return self.app_env.lower() in DEVELOPMENT_ENVS


def _secret_values() -> Dict[str, str]:
    secret_name = os.getenv("SMS_SECRET_NAME")
    if not secret_name:
        return {}
    data = get_app_secrets(secret_name)
    return {env: str(data[key]) for key, env in _SECRET_KEYS.items() if data.get(key)}


def load_settings() -> Settings:
    """
    Build Settings from the environment (and Secrets Manager when
    SMS_SECRET_NAME is set).

    Raises RuntimeError naming every missing or invalid variable.
    """
    overrides = _secret_values()

    def get(name: str, default: str = "") -> str:
        return overrides.get(name) or os.getenv(name, default)

    required = {
        "SHOPIFY_WEBHOOK_SECRET": get("SHOPIFY_WEBHOOK_SECRET"),
        "SMS_USERNAME": get("SMS_USERNAME"),
        "SMS_PASSWORD": get("SMS_PASSWORD"),
        "CHECK_CREDIT_URL": get("CHECK_CREDIT_URL"),
        "SMS_API_URL": get("SMS_API_URL"),
        "SMS_SENDER": get("SMS_SENDER"),
    }
    problems = [name for name, value in required.items() if not value]

    quota_mode = get("QUOTA_MODE", "credit").lower()
    if quota_mode not in QUOTA_MODES:
        problems.append(f"QUOTA_MODE='{quota_mode}' (expected one of {', '.join(QUOTA_MODES)})")

    timeout_str = get("HTTP_TIMEOUT_SECONDS", "10")
    try:
        http_timeout_seconds = float(timeout_str)
        if http_timeout_seconds <= 0:
            raise ValueError
    except ValueError:
        http_timeout_seconds = 0.0
        problems.append(f"HTTP_TIMEOUT_SECONDS='{timeout_str}' (must be a positive number)")

    max_quota_str = get("MAX_QUOTA", "10")
    try:
        max_quota = int(max_quota_str)
        if max_quota < 0:
            raise ValueError
    except ValueError:
        max_quota = 0
        problems.append(f"MAX_QUOTA='{max_quota_str}' (must be a non-negative integer)")

    if problems:
        msg = f"Missing or invalid configuration: {', '.join(problems)}"
        logger.error(msg)
        raise RuntimeError(msg)

    return Settings(
        shopify_webhook_secret=required["SHOPIFY_WEBHOOK_SECRET"],
        sms_username=required["SMS_USERNAME"],
        sms_password=required["SMS_PASSWORD"],
        check_credit_url=required["CHECK_CREDIT_URL"],
        sms_api_url=required["SMS_API_URL"],
        sms_sender=required["SMS_SENDER"],
        store_phone=get("STORE_PHONE"),
        sms_language=get("SMS_LANGUAGE", "ar"),
        http_timeout_seconds=http_timeout_seconds,
        quota_mode=quota_mode,
        max_quota=max_quota,
        idempotency_table=get("IDEMPOTENCY_TABLE") or None,
        app_env=get("APP_ENV", "production"),
    )
