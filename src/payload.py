import json
import re
from typing import Any, Iterable, Mapping, Optional

from src.errors import PayloadDecodeError
from src.utils.logger import get_logger

logger = get_logger("payload")

PHONE_PATTERN = re.compile(r"^\+?\d{8,15}$")

# Checked in order; the first valid phone wins.
PHONE_PATHS = (
    "customer.phone",
    "order.customer.phone",
    "checkout.billing_address.phone",
    "billing_address.phone",
    "shipping_address.phone",
)

ORDER_NUMBER_PATHS = (
    "order.order_number",
    "order_number",
    "order.name",
    "name",
)

ORDER_STATUS_PATHS = (
    "order.financial_status",
    "order.fulfillment_status",
    "financial_status",
    "fulfillment_status",
)


def decode_payload(raw_body: bytes) -> Any:
    """
    Parse a verified body. A body that passed the signature check but
    isn't JSON means the sender is misbehaving, so this is an upstream
    failure rather than a client error.
    """
    try:
        return json.loads(raw_body)
    except (UnicodeDecodeError, ValueError) as e:
        logger.error(
            "payload.invalid_json",
            extra={"error": str(e), "body_preview": raw_body[:200].decode("utf-8", "replace")},
        )
        raise PayloadDecodeError("Webhook body is not valid JSON") from e


def resolve_path(payload: Any, path: str) -> Any:
    """Walk a dotted path; any missing or non-mapping segment yields None."""
    node = payload
    for key in path.split("."):
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


def _first_value(payload: Any, paths: Iterable[str]) -> Optional[str]:
    for path in paths:
        value = resolve_path(payload, path)
        if value is None or isinstance(value, (dict, list, bool)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def extract_phone(payload: Any) -> Optional[str]:
    for path in PHONE_PATHS:
        value = resolve_path(payload, path)
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str):
            continue
        candidate = value.strip()
        if candidate and PHONE_PATTERN.match(candidate):
            return candidate
    return None


def extract_order_number(payload: Any) -> Optional[str]:
    return _first_value(payload, ORDER_NUMBER_PATHS)


def extract_order_status(payload: Any) -> Optional[str]:
    return _first_value(payload, ORDER_STATUS_PATHS)
