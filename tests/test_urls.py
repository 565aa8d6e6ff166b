from datetime import datetime, timezone

import pytest

from hollaex_sdk.auth.urls import (
    build_query,
    build_url,
    encode_value,
    normalize_params,
    to_snake_case,
)


@pytest.mark.parametrize(
    "key,expected",
    [
        ("startDate", "start_date"),
        ("start_date", "start_date"),
        ("orderBy", "order_by"),
        ("transactionID", "transaction_id"),
        ("symbol", "symbol"),
    ],
)
def test_to_snake_case(key, expected):
    assert to_snake_case(key) == expected


def test_camel_and_snake_inputs_normalize_identically():
    camel = build_url("/v2/user/deposits", {"startDate": "2024-01-01"})
    snake = build_url("/v2/user/deposits", {"start_date": "2024-01-01"})

    assert camel == snake == "/v2/user/deposits?start_date=2024-01-01"


def test_conflicting_casings_are_rejected():
    with pytest.raises(ValueError):
        normalize_params({"startDate": "2024-01-01", "start_date": "2024-02-01"})


def test_falsy_values_are_kept_and_none_is_dropped():
    url = build_url(
        "/v2/orders",
        {"symbol": "xht-usdt", "limit": 0, "open": False, "side": "", "page": None},
    )

    assert url == "/v2/orders?symbol=xht-usdt&limit=0&open=false&side="


def test_no_query_segment_without_params():
    assert build_url("/v2/user/balance") == "/v2/user/balance"
    assert build_url("/v2/user/balance", {}) == "/v2/user/balance"
    assert build_url("/v2/trades", {"symbol": None}) == "/v2/trades"


def test_insertion_order_is_preserved():
    assert build_query({"b": 1, "a": 2}) == "b=1&a=2"


def test_values_are_percent_encoded():
    assert build_query({"address": "a b:c/d"}) == "address=a%20b%3Ac%2Fd"


def test_sequence_values_repeat_the_key():
    assert build_query({"status": ["open", "filled"]}) == "status=open&status=filled"


def test_encode_value():
    assert encode_value(True) == "true"
    assert encode_value(1.5) == "1.5"
    assert encode_value(datetime(2024, 1, 1, tzinfo=timezone.utc)) == "2024-01-01T00:00:00+00:00"
