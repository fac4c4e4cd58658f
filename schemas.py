"""
Request and document schemas for the storefront admin API

Document models mirror the MongoDB collections (coupons, orders, users).
Request models are deliberately permissive about field values: the domain
rules in rules.py decide what is acceptable and with which message.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    customer = "customer"
    staff = "staff"


class OrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentMethod(str, Enum):
    cash_on_delivery = "cash_on_delivery"
    online_payment = "online_payment"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


# Coupons

class CouponIn(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    discountPercentage: Optional[Any] = None
    discountedPrice: Optional[Any] = None


class CouponApply(BaseModel):
    code: Optional[str] = None
    subtotal: Optional[Any] = None


# Orders

class OrderItemIn(BaseModel):
    productId: Optional[str] = None
    productName: Optional[str] = None
    quantity: Optional[float] = None
    qty: Optional[float] = None
    unitPrice: Optional[float] = None
    price: Optional[float] = None
    image: Optional[str] = None
    maintenanceFee: Optional[float] = None


class ShippingAddressIn(BaseModel):
    fullName: str = ""
    email: str = ""
    phone: str = ""
    streetAddress: str = ""
    apartment: Optional[str] = None
    city: str = ""
    zipCode: str = ""


class PaymentIn(BaseModel):
    method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    transactionId: Optional[str] = None


class OrderIn(BaseModel):
    orderId: Optional[str] = None
    userId: Optional[str] = None
    items: List[OrderItemIn] = []
    shippingAddress: ShippingAddressIn = Field(default_factory=ShippingAddressIn)
    payment: PaymentIn = Field(default_factory=PaymentIn)
    notes: str = ""
    deliveryTime: Optional[str] = None
    productsSubtotal: Optional[float] = None
    subtotal: Optional[float] = None
    maintenanceFee: float = 0
    shippingCost: Optional[float] = None
    deliveryCharge: Optional[float] = None
    discountAmount: float = 0
    total: Optional[float] = None
    coupon: Optional[Dict[str, Any]] = None
    status: Optional[OrderStatus] = None


class StatusChange(BaseModel):
    status: Optional[str] = None


# Users

class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    isActive: Optional[bool] = None
    avatar: Optional[str] = None
    addresses: Optional[List[Dict[str, Any]]] = None
    isAdmin: Optional[int] = None


class UserStatusChange(BaseModel):
    isActive: bool


class User(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str
    email: str
    phone: str = ""
    role: Role = Role.customer
    isActive: bool = True
    isAdmin: int = Field(0, ge=0, le=1)
    addresses: List[Dict[str, Any]] = []
    passwordHash: Optional[str] = None
    totalOrders: int = 0
    totalSpent: float = 0
