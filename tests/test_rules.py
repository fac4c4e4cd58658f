from datetime import datetime, timezone

import pytest

import rules
from schemas import OrderStatus, Role


def test_generated_codes_use_the_unambiguous_alphabet():
    for _ in range(200):
        code = rules.generate_coupon_code()
        assert len(code) == 14
        assert set(code) <= set(rules.COUPON_CHARS)
        assert "I" not in code and "O" not in code


def test_normalize_coupon_code():
    assert rules.normalize_coupon_code(" abcd-efgh jkmn-pq ") == "ABCDEFGHJKMNPQ"
    assert rules.normalize_coupon_code(None) == ""
    assert rules.is_valid_code("ABCDEFGHJKMNPQ")
    assert not rules.is_valid_code("ABC")


@pytest.mark.parametrize("value,expected", [
    ("12", 12.0),
    (7, 7.0),
    ("", None),
    (None, None),
    ("abc", None),
    ("nan", None),
    ("inf", None),
    (True, None),
])
def test_parse_number(value, expected):
    assert rules.parse_number(value) == expected


def test_parse_date_is_utc_aware():
    parsed = rules.parse_date("2026-03-01")
    assert parsed == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert rules.parse_date("2026-03-01T10:00:00Z").hour == 10
    assert rules.parse_date("not a date") is None
    assert rules.format_input_date(datetime(2026, 3, 1, 15, 30)) == "2026-03-01"


def valid(**overrides):
    data = {"name": "Eid", "startDate": "2026-01-01", "endDate": "2026-01-31", "discountPercentage": "15", "discountedPrice": ""}
    data.update(overrides)
    return data


def test_validate_coupon_returns_cleaned_fields():
    cleaned = rules.validate_coupon(valid(name="  Eid  "))
    assert cleaned["name"] == "Eid"
    assert cleaned["discountPercentage"] == 15
    assert cleaned["discountedPrice"] is None
    assert cleaned["endDate"] > cleaned["startDate"]


def test_validate_coupon_price_only():
    cleaned = rules.validate_coupon(valid(discountPercentage=None, discountedPrice=499))
    assert cleaned["discountPercentage"] is None
    assert cleaned["discountedPrice"] == 499


def test_same_day_coupon_is_valid():
    rules.validate_coupon(valid(endDate="2026-01-01"))


@pytest.mark.parametrize("overrides,message", [
    ({"name": "   "}, "Coupon name is required."),
    ({"startDate": "soon"}, "Please provide valid start and end dates."),
    ({"endDate": None}, "Please provide valid start and end dates."),
    ({"startDate": "2026-02-01"}, "End date must be after the start date."),
    ({"discountedPrice": 100}, "Provide either a discount percentage or a discounted price."),
    ({"discountPercentage": ""}, "Provide a discount percentage or a discounted price."),
    ({"discountPercentage": 0, "discountedPrice": -5}, "Provide a discount percentage or a discounted price."),
    ({"discountPercentage": 101}, "Discount percentage must be between 1 and 100."),
])
def test_validate_coupon_rejections(overrides, message):
    with pytest.raises(rules.RuleViolation) as excinfo:
        rules.validate_coupon(valid(**overrides))
    assert excinfo.value.message == message


def test_coupon_status():
    now = datetime(2026, 6, 15, tzinfo=timezone.utc)
    assert rules.coupon_status("2026-07-01", "2026-07-31", now) == "upcoming"
    assert rules.coupon_status("2026-05-01", "2026-05-31", now) == "expired"
    assert rules.coupon_status("2026-06-01", "2026-06-30", now) == "active"
    assert rules.coupon_status(None, "2026-06-30", now) == "unknown"


def test_coupon_discount():
    now = datetime(2026, 6, 15, tzinfo=timezone.utc)
    percent = {"startDate": "2026-06-01", "endDate": "2026-06-30", "discountPercentage": 15}
    assert rules.coupon_discount(percent, 1000, now) == 150
    price = {"startDate": "2026-06-01", "endDate": "2026-06-30", "discountedPrice": 800}
    assert rules.coupon_discount(price, 1000, now) == 200

    with pytest.raises(rules.RuleViolation, match="less than cart subtotal"):
        rules.coupon_discount(price, 500, now)
    ten = {**percent, "discountPercentage": 10}
    assert rules.coupon_discount(ten, 25, now) == 3
    assert rules.coupon_discount(ten, 35, now) == 4

    with pytest.raises(rules.RuleViolation, match="expired"):
        rules.coupon_discount({**percent, "endDate": "2026-06-10"}, 1000, now)


def test_minimum_subtotal():
    now = datetime(2026, 6, 15, tzinfo=timezone.utc)
    coupon = {"startDate": "2026-06-01", "endDate": "2026-06-30", "discountPercentage": 10, "minSubtotal": 500}
    with pytest.raises(rules.RuleViolation) as excinfo:
        rules.check_coupon_usable(coupon, 499, now)
    assert excinfo.value.message == "Cart subtotal must be at least 500"
    rules.check_coupon_usable(coupon, 500, now)
    assert rules.coupon_discount({**coupon, "minSubtotal": None}, 100, now) == 10


def test_any_known_order_status_is_reachable():
    for current in rules.ORDER_STATUSES:
        for new in rules.ORDER_STATUSES:
            rules.check_order_transition(current, new)
    with pytest.raises(rules.RuleViolation, match="Invalid status value"):
        rules.check_order_transition("pending", "lost")


def test_order_and_role_values_follow_the_schema_enums():
    assert rules.ORDER_STATUSES == tuple(s.value for s in OrderStatus)
    assert "pending" in rules.ORDER_STATUSES
    assert rules.USER_ROLES == tuple(r.value for r in Role)
