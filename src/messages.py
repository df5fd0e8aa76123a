from types import MappingProxyType
from typing import Any, Optional

from src.payload import extract_order_number, extract_order_status

PLACEHOLDER = "N/A"

# Supported SMS templates by Shopify topic (Arabic; sent with SMSLang=ar)
EVENT_TEMPLATES = MappingProxyType({
    "orders/create": "📦 تم تأكيد طلبك #{order_number}! شكراً لك.",
    "orders/cancelled": "⚠️ تم إلغاء طلبك #{order_number}. للتواصل: {store_contact}",
    "orders/updated": "🔄 تم تحديث حالة الطلب #{order_number}: {status}.",
    "orders/paid": "💳 تم دفع طلبك #{order_number}.",
    "orders/fulfilled": "🚚 تم شحن طلبك #{order_number}.",
})


def is_supported(topic: str) -> bool:
    return topic in EVENT_TEMPLATES


def compose(topic: str, payload: Any, store_contact: Optional[str] = None) -> Optional[str]:
    """
    Build the SMS body for a Shopify topic, or None when the topic has no
    template. Missing order fields render as N/A.
    """
    template = EVENT_TEMPLATES.get(topic)
    if template is None:
        return None

    order_number = (extract_order_number(payload) or "").lstrip("#")

    return template.format(
        order_number=order_number or PLACEHOLDER,
        status=extract_order_status(payload) or PLACEHOLDER,
        store_contact=(store_contact or "").strip() or PLACEHOLDER,
    )
