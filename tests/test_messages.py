import pytest

from src.messages import EVENT_TEMPLATES, PLACEHOLDER, compose, is_supported

ORDER = {"order": {"order_number": "1001", "financial_status": "pending", "fulfillment_status": "partial"}}


@pytest.mark.parametrize("topic", sorted(EVENT_TEMPLATES))
def test_every_supported_topic_mentions_order_number(topic):
    message = compose(topic, ORDER, "+966112223333")
    assert message is not None
    assert "1001" in message


@pytest.mark.parametrize("topic", ["orders/weird_event", "products/create", "", "ORDERS/CREATE"])
def test_unknown_topic_returns_none(topic):
    assert compose(topic, ORDER) is None
    assert is_supported(topic) is False


def test_cancelled_includes_store_contact():
    assert "+966112223333" in compose("orders/cancelled", ORDER, "+966112223333")


def test_cancelled_without_contact_uses_placeholder():
    assert compose("orders/cancelled", ORDER).endswith(PLACEHOLDER)


def test_updated_reports_financial_status_first():
    message = compose("orders/updated", ORDER)
    assert "pending" in message
    assert "partial" not in message
    assert "partial" in compose("orders/updated", {"order": {"order_number": "1", "fulfillment_status": "partial"}})
    assert PLACEHOLDER in compose("orders/updated", {"order": {"order_number": "1"}})


def test_missing_order_number_uses_placeholder():
    assert f"#{PLACEHOLDER}" in compose("orders/paid", {})


def test_shopify_order_name_is_not_double_hashed():
    message = compose("orders/fulfilled", {"name": "#1005"})
    assert "#1005" in message
    assert "##" not in message


def test_compose_is_deterministic():
    first = compose("orders/create", ORDER)
    second = compose("orders/create", ORDER)
    assert first.encode("utf-8") == second.encode("utf-8")


def test_templates_are_read_only():
    with pytest.raises(TypeError):
        EVENT_TEMPLATES["orders/create"] = "changed"
