"""
Admin resources

A Resource names one admin-managed collection and carries everything that
differs between the coupon, order and user screens: the endpoint, the key the
list endpoint wraps items in, the identity field, the client-side validation
hook and the status transition hook.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import rules

Entity = Dict[str, Any]
Validator = Callable[[Dict[str, Any]], Any]


def accept_any(payload: Dict[str, Any]) -> None:
    return None


def order_transition(current: Optional[str], new: str) -> None:
    rules.check_order_transition(current, new)


@dataclass(frozen=True)
class Resource:
    name: str
    label: str
    id_field: str = "_id"
    validate: Validator = accept_any
    check_transition: rules.TransitionCheck = rules.allow_any_transition
    # key the server wraps single entities in, e.g. {"user": {...}}
    wrapper_key: Optional[str] = None

    @property
    def path(self) -> str:
        return f"/api/{self.name}"

    @property
    def items_key(self) -> str:
        return self.name

    def identity(self, entity: Optional[Entity]) -> Optional[str]:
        if not entity:
            return None
        value = entity.get(self.id_field)
        return str(value) if value is not None else None

    def failure(self, action: str, subject: Optional[str] = None) -> str:
        return f"Failed to {action} {subject or self.label}"


COUPONS = Resource("coupons", "coupon", validate=rules.validate_coupon, wrapper_key="coupon")
ORDERS = Resource("orders", "order", check_transition=order_transition, wrapper_key="order")
USERS = Resource("users", "user", wrapper_key="user")


@dataclass
class CouponForm:
    """The create/edit coupon form.

    Field values are kept as the strings a form holds. A new form starts with
    a freshly generated code that can be regenerated until the coupon exists.
    """

    name: str = ""
    code: str = field(default_factory=rules.generate_coupon_code)
    start_date: str = ""
    end_date: str = ""
    discount_percentage: str = ""
    discounted_price: str = ""
    id: Optional[str] = None

    def regenerate_code(self) -> str:
        if self.id is not None:
            raise rules.RuleViolation("Coupon code cannot be changed once created")
        self.code = rules.generate_coupon_code()
        return self.code

    @classmethod
    def from_entity(cls, entity: Entity) -> "CouponForm":
        def positive(value) -> str:
            number = rules.parse_number(value)
            if number is None or number <= 0:
                return ""
            return str(int(number)) if number.is_integer() else str(number)

        return cls(
            id=COUPONS.identity(entity),
            name=entity.get("name") or "",
            code=entity.get("code") or "",
            start_date=rules.format_input_date(entity.get("startDate")),
            end_date=rules.format_input_date(entity.get("endDate")),
            discount_percentage=positive(entity.get("discountPercentage")),
            discounted_price=positive(entity.get("discountedPrice")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name.strip(),
            "code": self.code,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "discountPercentage": rules.parse_number(self.discount_percentage),
            "discountedPrice": rules.parse_number(self.discounted_price),
        }
