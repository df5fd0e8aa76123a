import json
import os
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from src.utils.logger import get_logger

logger = get_logger("secrets")


def _get_region() -> str:
    return os.getenv("AWS_REGION", "us-east-1")


def get_app_secrets(secret_name: str, region_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Fetch webhook and SMS gateway credentials from AWS Secrets Manager.

    Expects the secret value to be a JSON object, e.g.:

        {
          "shopify_webhook_secret": "...",
          "sms_username": "...",
          "sms_password": "..."
        }

    Keys that are absent simply fall back to environment variables in
    config.load_settings().
    """
    region_name = region_name or _get_region()

    logger.info(
        "secrets.fetch",
        extra={"secret_name": secret_name, "region": region_name},
    )

    client = boto3.client("secretsmanager", region_name=region_name)

    try:
        resp = client.get_secret_value(SecretId=secret_name)
    except ClientError as e:
        logger.error(
            "secrets.fetch_failed",
            extra={"secret_name": secret_name, "error": str(e)},
        )
        raise RuntimeError(f"Unable to read secret '{secret_name}'") from e

    secret_str = resp.get("SecretString")

    if not secret_str:
        msg = f"Secret '{secret_name}' has no SecretString payload"
        logger.error(msg)
        raise RuntimeError(msg)

    try:
        data = json.loads(secret_str)
    except json.JSONDecodeError as e:
        logger.error(
            "secrets.invalid_json",
            extra={"secret_name": secret_name, "error": str(e)},
        )
        raise RuntimeError(f"Secret '{secret_name}' is not valid JSON") from e

    if not isinstance(data, dict):
        raise RuntimeError(f"Secret '{secret_name}' must be a JSON object")

    return data
