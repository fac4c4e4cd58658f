"""
Domain rules shared by the admin API and the admin console.

Coupon codes, coupon validation, derived coupon status, coupon discounts and
the order status hook all live here so both sides reject the same input with
the same message.
"""
import math
import re
import secrets
from datetime import date, datetime, timezone
from typing import Callable, Dict, Optional

from schemas import OrderStatus, Role

CODE_LENGTH = 14
COUPON_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ0123456789"

ORDER_STATUSES = tuple(status.value for status in OrderStatus)
USER_ROLES = tuple(role.value for role in Role)


class RuleViolation(ValueError):
    """Input rejected by a domain rule. The message is user facing."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


# Coupon codes

def generate_coupon_code() -> str:
    return "".join(secrets.choice(COUPON_CHARS) for _ in range(CODE_LENGTH))


def normalize_coupon_code(value) -> str:
    if not isinstance(value, str):
        return ""
    return re.sub(r"[^a-zA-Z0-9]", "", value).upper()


def is_valid_code(value: str) -> bool:
    return len(value) == CODE_LENGTH and re.fullmatch(r"[A-Z0-9]+", value) is not None


# Parsing helpers

def parse_number(value) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def parse_date(value) -> Optional[datetime]:
    """Parse an ISO date or datetime into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_input_date(value) -> str:
    parsed = parse_date(value)
    return parsed.date().isoformat() if parsed else ""


# Coupon validation

def validate_coupon_dates(start, end):
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        raise RuleViolation("Please provide valid start and end dates.")
    if end_date < start_date:
        raise RuleViolation("End date must be after the start date.")
    return start_date, end_date


def validate_discount_fields(percentage, discounted_price):
    """Return (percentage, price) with exactly one of them set."""
    percentage_value = parse_number(percentage)
    price_value = parse_number(discounted_price)
    has_percentage = percentage_value is not None and percentage_value > 0
    has_price = price_value is not None and price_value > 0

    if has_percentage and has_price:
        raise RuleViolation("Provide either a discount percentage or a discounted price.")
    if not has_percentage and not has_price:
        raise RuleViolation("Provide a discount percentage or a discounted price.")
    if has_percentage and percentage_value > 100:
        raise RuleViolation("Discount percentage must be between 1 and 100.")

    return (percentage_value if has_percentage else None,
            price_value if has_price else None)


def validate_coupon(data: Dict) -> Dict:
    """Validate coupon input and return the cleaned fields.

    The checks run in the order the admin form reports them: name, dates,
    discount.
    """
    name = data.get("name")
    name = name.strip() if isinstance(name, str) else ""
    if not name:
        raise RuleViolation("Coupon name is required.")

    start_date, end_date = validate_coupon_dates(data.get("startDate"), data.get("endDate"))
    percentage, price = validate_discount_fields(
        data.get("discountPercentage"), data.get("discountedPrice")
    )
    return {
        "name": name,
        "startDate": start_date,
        "endDate": end_date,
        "discountPercentage": percentage,
        "discountedPrice": price,
    }


def coupon_status(start, end, now: Optional[datetime] = None) -> str:
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        return "unknown"
    now = now or datetime.now(timezone.utc)
    if now < start_date:
        return "upcoming"
    if now > end_date:
        return "expired"
    return "active"


def _amount(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def check_coupon_usable(coupon: Dict, subtotal: float, now: Optional[datetime] = None) -> None:
    """Reject a coupon the cart cannot use: below its minimum subtotal or outside its dates."""
    minimum = parse_number(coupon.get("minSubtotal"))
    if minimum and subtotal < minimum:
        raise RuleViolation(f"Cart subtotal must be at least {_amount(minimum)}")

    status = coupon_status(coupon.get("startDate"), coupon.get("endDate"), now)
    if status == "unknown":
        raise RuleViolation("Coupon dates are invalid")
    if status == "upcoming":
        raise RuleViolation("Coupon is not active yet")
    if status == "expired":
        raise RuleViolation("Coupon has expired")


def coupon_discount(coupon: Dict, subtotal: float, now: Optional[datetime] = None) -> float:
    """Discount a coupon grants on a cart subtotal.

    Percentage discounts are rounded to a whole amount, halves upwards.
    """
    check_coupon_usable(coupon, subtotal, now)

    percentage = parse_number(coupon.get("discountPercentage"))
    price = parse_number(coupon.get("discountedPrice"))
    if percentage and percentage > 0:
        return float(math.floor(subtotal * percentage / 100 + 0.5))
    if price and price > 0:
        if price >= subtotal:
            raise RuleViolation("Discounted price must be less than cart subtotal")
        return subtotal - price
    raise RuleViolation("This coupon has no discount configured")


# Order status

TransitionCheck = Callable[[Optional[str], str], None]


def allow_any_transition(current: Optional[str], new: str) -> None:
    """Default order status hook: every known status is reachable from any other."""
    if new not in ORDER_STATUSES:
        raise RuleViolation("Invalid status value")


check_order_transition: TransitionCheck = allow_any_transition
