import pytest

from src.errors import PayloadDecodeError, UpstreamError
from src.payload import (
    decode_payload,
    extract_order_number,
    extract_order_status,
    extract_phone,
    resolve_path,
)


def test_resolve_path_walks_nested_keys():
    assert resolve_path({"a": {"b": {"c": 1}}}, "a.b.c") == 1


def test_resolve_path_missing_segments_return_none():
    assert resolve_path({"a": {}}, "a.b.c") is None
    assert resolve_path({"a": None}, "a.b") is None
    assert resolve_path({"a": "text"}, "a.b") is None
    assert resolve_path(["not", "a", "mapping"], "a") is None


def test_customer_phone_wins_over_shipping_phone():
    payload = {
        "customer": {"phone": "+966500000000"},
        "shipping_address": {"phone": "+966511111111"},
    }
    assert extract_phone(payload) == "+966500000000"


def test_falls_through_paths_in_order():
    payload = {
        "order": {"customer": {"phone": None}},
        "checkout": {"billing_address": {}},
        "billing_address": {"phone": "0501234567"},
        "shipping_address": {"phone": "+966511111111"},
    }
    assert extract_phone(payload) == "0501234567"


def test_invalid_candidate_is_skipped():
    payload = {
        "customer": {"phone": "call me"},
        "shipping_address": {"phone": " +966511111111 "},
    }
    assert extract_phone(payload) == "+966511111111"


@pytest.mark.parametrize("phone", ["", "1234567", "+1234567890123456", "+966-50-000", 1234567, True])
def test_rejects_values_outside_pattern(phone):
    assert extract_phone({"customer": {"phone": phone}}) is None


def test_numeric_phone_is_accepted():
    assert extract_phone({"customer": {"phone": 966500000000}}) == "966500000000"


def test_no_phone_anywhere():
    assert extract_phone({"order": {"order_number": "1"}}) is None
    assert extract_phone({}) is None
    assert extract_phone([]) is None


def test_order_number_and_status_lookups():
    payload = {"order": {"order_number": 1002, "financial_status": "paid"}}
    assert extract_order_number(payload) == "1002"
    assert extract_order_status(payload) == "paid"
    assert extract_order_number({"name": "#1003"}) == "#1003"
    assert extract_order_status({}) is None
    both = {"order": {"financial_status": "paid", "fulfillment_status": "fulfilled"}}
    assert extract_order_status(both) == "paid"


def test_decode_payload_parses_bytes():
    assert decode_payload(b'{"a": 1}') == {"a": 1}


def test_decode_payload_rejects_garbage():
    with pytest.raises(PayloadDecodeError) as exc:
        decode_payload(b"{not json")
    assert isinstance(exc.value, UpstreamError)
    assert exc.value.status_code == 500

    with pytest.raises(PayloadDecodeError):
        decode_payload(b"\xff\xfe\x00")
