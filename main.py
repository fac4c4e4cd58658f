import logging
import os
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Depends, Query, Request, status, Body
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

import rules
from database import db, create_document, object_id, paginate, serialize
from schemas import CouponApply, CouponIn, OrderIn, Role, StatusChange, User, UserStatusChange, UserUpdate

# Auth settings
SECRET_KEY = os.getenv("SECRET_KEY", "secret-key-change-me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 12))

# Paging settings
COUPONS_PAGE_LIMIT = int(os.getenv("COUPONS_PAGE_LIMIT", 10))
ORDERS_PAGE_LIMIT = 10
ORDERS_MAX_LIMIT = 50
USERS_PAGE_LIMIT = int(os.getenv("USERS_PAGE_LIMIT", 10))
USERS_MAX_LIMIT = int(os.getenv("USERS_MAX_LIMIT", 50))
PRODUCTS_PAGE_LIMIT = 6

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

app = FastAPI(title="Storefront Admin API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error leaves the API as {"error": message}

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = "Invalid request"
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse({"error": message}, status_code=400)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def _collection(name: str):
    if db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return db[name]


def _regex(term: str) -> Dict[str, str]:
    return {"$regex": re.escape(term), "$options": "i"}


def _first(*values):
    return next((v for v in values if v is not None), None)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    username: Optional[str] = None


class LoginPayload(BaseModel):
    email: str
    password: str


# Helper functions for auth

def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(token: str = Depends(oauth2_scheme)):
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        username: str = payload.get("sub")
        if username is None:
            raise _credentials_error()
        token_data = TokenData(username=username)
    except JWTError:
        raise _credentials_error()

    user = _collection("users").find_one({"email": token_data.username, "isActive": True})
    if not user:
        raise _credentials_error()
    return user


async def get_current_admin(user=Depends(get_current_user)):
    if user.get("isAdmin") != 1:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Admin access required")
    return user


@app.get("/")
def root():
    return {"message": "Storefront Admin API Running"}


# Auth endpoints
@app.post("/auth/login", response_model=Token)
def login(payload: LoginPayload):
    email = payload.email.strip().lower()
    user = _collection("users").find_one({"email": email, "isActive": True})
    if not user or not verify_password(payload.password, user.get("passwordHash", "")):
        raise HTTPException(400, "Incorrect email or password")

    access_token = create_access_token(data={"sub": email})
    return {"access_token": access_token, "token_type": "bearer"}


# Seed admin user if not exists
@app.post("/auth/seed-admin")
def seed_admin(email: str = Body(...), password: str = Body(...), name: str = Body("Administrator")):
    users = _collection("users")
    email = email.strip().lower()
    if users.find_one({"email": email}):
        return {"status": "exists"}
    create_document("users", User(
        name=name,
        email=email,
        role=Role.admin,
        isAdmin=1,
        passwordHash=get_password_hash(password),
    ))
    logger.info(f"Seeded admin user {email}")
    return {"status": "created"}


# Coupons

def _validated_coupon(payload: CouponIn) -> Dict[str, Any]:
    try:
        return rules.validate_coupon(payload.model_dump())
    except rules.RuleViolation as exc:
        raise HTTPException(400, exc.message)


def _coupon_or_404(coupon_id: str):
    oid = object_id(coupon_id)
    if oid is None:
        raise HTTPException(400, "Invalid coupon ID")
    coupon = _collection("coupons").find_one({"_id": oid})
    if not coupon:
        raise HTTPException(404, "Coupon not found")
    return coupon


@app.get("/api/coupons")
def list_coupons(page: int = 1, search: str = "", limit: int = COUPONS_PAGE_LIMIT, admin=Depends(get_current_admin)):
    page_limit = limit if limit > 0 else COUPONS_PAGE_LIMIT
    query = {}
    search = search.strip()
    if search:
        query["$or"] = [{"name": _regex(search)}, {"code": _regex(search)}]

    coupons, total_count, total_pages, page = paginate(_collection("coupons"), query, page, page_limit)
    return {
        "coupons": coupons,
        "totalPages": total_pages,
        "currentPage": page,
        "totalCount": total_count,
        "pageLimit": page_limit,
    }


@app.post("/api/coupons", status_code=201)
def create_coupon(payload: CouponIn, admin=Depends(get_current_admin)):
    fields = _validated_coupon(payload)
    code = rules.normalize_coupon_code(payload.code) or rules.generate_coupon_code()
    if not rules.is_valid_code(code):
        raise HTTPException(400, "Coupon code must be 14 alphanumeric characters")

    coupons = _collection("coupons")
    if coupons.find_one({"code": code}):
        raise HTTPException(409, "Coupon code already exists. Please regenerate.")

    now = datetime.now(timezone.utc)
    result = coupons.insert_one({**fields, "code": code, "appliesTo": "all", "createdAt": now, "updatedAt": now})
    logger.info(f"Created coupon {code}")
    return serialize(coupons.find_one({"_id": result.inserted_id}))


@app.post("/api/coupons/apply")
def apply_coupon(payload: CouponApply, user=Depends(get_current_user)):
    """Apply a coupon to the signed-in user's cart. Each user may redeem a coupon once."""
    code = rules.normalize_coupon_code(payload.code)
    if not code:
        raise HTTPException(400, "Coupon code is required")
    subtotal = rules.parse_number(payload.subtotal)
    if not subtotal or subtotal <= 0:
        raise HTTPException(400, "Cart subtotal is required to apply a coupon")

    coupon = _collection("coupons").find_one({"code": code})
    if not coupon:
        raise HTTPException(404, "Coupon not found")

    assigned = coupon.get("assignedUserId")
    if assigned and str(assigned) != str(user["_id"]):
        raise HTTPException(403, "This coupon is not assigned to your account")

    try:
        rules.check_coupon_usable(coupon, subtotal)
    except rules.RuleViolation as exc:
        raise HTTPException(400, exc.message)

    redemptions = _collection("couponRedemptions")
    if redemptions.find_one({"userId": user["_id"], "couponId": coupon["_id"]}):
        raise HTTPException(409, "You have already used this coupon")

    try:
        discount = rules.coupon_discount(coupon, subtotal)
    except rules.RuleViolation as exc:
        raise HTTPException(400, exc.message)

    applied_at = datetime.now(timezone.utc)
    redemptions.insert_one({
        "userId": user["_id"],
        "couponId": coupon["_id"],
        "code": coupon["code"],
        "discountPercentage": rules.parse_number(coupon.get("discountPercentage")),
        "discountedPrice": rules.parse_number(coupon.get("discountedPrice")),
        "subtotal": subtotal,
        "discountAmount": discount,
        "appliedAt": applied_at,
    })
    logger.info(f"Coupon {coupon['code']} redeemed by {user.get('email')}")

    return {
        "coupon": serialize({k: coupon.get(k) for k in ("_id", "name", "code", "startDate", "endDate", "discountPercentage", "discountedPrice")}),
        "redemption": {"appliedAt": applied_at, "discountAmount": discount},
        "discountAmount": discount,
        "total": subtotal - discount,
    }


@app.get("/api/coupons/{coupon_id}")
def get_coupon(coupon_id: str, admin=Depends(get_current_admin)):
    return serialize(_coupon_or_404(coupon_id))


@app.put("/api/coupons/{coupon_id}")
def update_coupon(coupon_id: str, payload: CouponIn, admin=Depends(get_current_admin)):
    existing = _coupon_or_404(coupon_id)
    fields = _validated_coupon(payload)

    code = rules.normalize_coupon_code(payload.code)
    if code and code != existing.get("code"):
        raise HTTPException(400, "Coupon code cannot be changed once created")

    coupons = _collection("coupons")
    coupons.update_one({"_id": existing["_id"]}, {"$set": {**fields, "updatedAt": datetime.now(timezone.utc)}})
    logger.info(f"Updated coupon {existing.get('code')}")
    return serialize(coupons.find_one({"_id": existing["_id"]}))


@app.delete("/api/coupons/{coupon_id}")
def delete_coupon(coupon_id: str, admin=Depends(get_current_admin)):
    existing = _coupon_or_404(coupon_id)
    _collection("coupons").delete_one({"_id": existing["_id"]})
    logger.info(f"Deleted coupon {existing.get('code')}")
    return {"message": "Coupon deleted successfully"}


# Orders

ORDER_SEARCH_FIELDS = (
    "orderId",
    "status",
    "shippingAddress.fullName",
    "shippingAddress.email",
    "shippingAddress.phone",
    "notes",
    "items.productName",
    "payment.method",
)


def _generate_order_id() -> str:
    return f"RBS{str(int(time.time() * 1000))[-6:]}"


@app.get("/api/orders")
def list_orders(page: int = 1, search: str = "", limit: int = ORDERS_PAGE_LIMIT, admin=Depends(get_current_admin)):
    page_limit = min(ORDERS_MAX_LIMIT, max(1, limit))
    query = {}
    search = search.strip()
    if search:
        query["$or"] = [{field: _regex(search)} for field in ORDER_SEARCH_FIELDS]

    orders, total_count, total_pages, page = paginate(_collection("orders"), query, page, page_limit)
    return {
        "orders": orders,
        "totalPages": total_pages,
        "currentPage": page,
        "totalCount": total_count,
        "pageLimit": page_limit,
    }


@app.post("/api/orders", status_code=201)
def create_order(payload: OrderIn):
    if not payload.items:
        raise HTTPException(400, "Order must contain at least one item")

    address = {k: (v or "").strip() for k, v in payload.shippingAddress.model_dump().items()}
    required = ("fullName", "email", "phone", "streetAddress", "city", "zipCode")
    if not all(address[k] for k in required):
        raise HTTPException(400, "Incomplete shipping address information")

    items = []
    for index, item in enumerate(payload.items, start=1):
        product_id = (item.productId or "").strip()
        if not product_id:
            raise HTTPException(400, f"Missing productId for item #{index}")
        items.append({
            "productId": product_id,
            "productName": (item.productName or "").strip() or f"Item #{index}",
            "quantity": max(1, _first(item.quantity, item.qty, 1)),
            "unitPrice": max(0, _first(item.unitPrice, item.price, 0)),
            "image": item.image or None,
            "maintenanceFee": max(0, item.maintenanceFee or 0),
        })

    products_subtotal = _first(payload.productsSubtotal, payload.subtotal, 0)
    shipping_cost = _first(payload.shippingCost, payload.deliveryCharge, 0)
    total = _first(payload.total, products_subtotal + payload.maintenanceFee + shipping_cost - payload.discountAmount)
    payment = payload.payment

    now = datetime.now(timezone.utc)
    doc = {
        "orderId": (payload.orderId or "").strip() or _generate_order_id(),
        "userId": object_id(payload.userId),
        "items": items,
        "shippingAddress": {**address, "apartment": address["apartment"] or None},
        "payment": {
            "method": payment.method.value if payment.method else "cash_on_delivery",
            "status": payment.status.value if payment.status else "pending",
            "amount": _first(payment.amount, total),
            "currency": payment.currency or "BDT",
            "transactionId": payment.transactionId or None,
        },
        "notes": payload.notes.strip(),
        "deliveryTime": payload.deliveryTime or "anytime",
        "productsSubtotal": products_subtotal,
        "maintenanceFee": payload.maintenanceFee,
        "shippingCost": shipping_cost,
        "deliveryCharge": _first(payload.deliveryCharge, shipping_cost),
        "subtotal": _first(payload.subtotal, products_subtotal + payload.maintenanceFee),
        "discountAmount": payload.discountAmount,
        "total": total,
        "coupon": payload.coupon,
        "status": payload.status.value if payload.status else "pending",
        "createdAt": now,
        "updatedAt": now,
    }
    orders = _collection("orders")
    result = orders.insert_one(doc)
    logger.info(f"Created order {doc['orderId']}")
    return {"order": serialize(orders.find_one({"_id": result.inserted_id}))}


def _inventory_status(quantity: int, threshold: int) -> str:
    if quantity == 0:
        return "out_of_stock"
    if quantity <= threshold:
        return "low_stock"
    return "in_stock"


def _update_inventory(order: Dict[str, Any], operation: str) -> None:
    """Reduce or restore product stock for every line of an order."""
    products = _collection("products")
    for item in order.get("items", []):
        oid = object_id(item.get("productId"))
        quantity = item.get("quantity") or 0
        if oid is None or not quantity:
            continue
        product = products.find_one({"_id": oid})
        if not product or not product.get("inventory"):
            logger.warning(f"Product {item.get('productId')} not found or missing inventory while updating")
            continue

        current = product["inventory"].get("quantity", 0)
        threshold = product["inventory"].get("threshold", 0)
        if operation == "reduce":
            new_quantity = max(0, current - quantity)
        else:
            new_quantity = current + quantity
        products.update_one(
            {"_id": oid},
            {"$set": {
                "inventory.quantity": new_quantity,
                "inventory.status": _inventory_status(new_quantity, threshold),
                "updatedAt": datetime.now(timezone.utc),
            }},
        )


@app.patch("/api/orders/{order_id}/status")
def change_order_status(order_id: str, payload: StatusChange, admin=Depends(get_current_admin)):
    oid = object_id(order_id)
    if oid is None:
        raise HTTPException(400, "Invalid order ID")
    new_status = payload.status
    if new_status not in rules.ORDER_STATUSES:
        raise HTTPException(400, "Invalid status value")

    orders = _collection("orders")
    order = orders.find_one({"_id": oid})
    if not order:
        raise HTTPException(404, "Order not found")

    previous = order.get("status")
    try:
        rules.check_order_transition(previous, new_status)
    except rules.RuleViolation as exc:
        raise HTTPException(400, exc.message)

    if new_status == "cancelled" and previous != "cancelled":
        _update_inventory(order, "restore")
    elif previous == "cancelled" and new_status != "cancelled":
        _update_inventory(order, "reduce")

    now = datetime.now(timezone.utc)
    update = {"status": new_status, "updatedAt": now}
    payment = order.get("payment") or {}
    if new_status == "delivered" and payment.get("method") == "cash_on_delivery" and payment.get("status") == "pending":
        update["payment.status"] = "paid"
        update["payment.paidAt"] = now
    if new_status == "cancelled" and payment.get("status") == "paid":
        update["payment.status"] = "refunded"

    orders.update_one({"_id": oid}, {"$set": update})
    logger.info(f"Order {order.get('orderId')} status {previous} -> {new_status}")
    return {"message": "Order status updated successfully", "order": serialize(orders.find_one({"_id": oid}))}


# Users

def _format_user(user: Dict[str, Any]) -> Dict[str, Any]:
    user = serialize(user)
    user.pop("passwordHash", None)
    addresses = user.get("addresses") or []
    user["address"] = addresses[0] if addresses else None
    return user


def _user_order_stats(user_oid) -> Dict[str, Any]:
    orders = list(_collection("orders").find({"userId": user_oid}).sort("createdAt", -1))
    if not orders:
        return {"totalOrders": 0, "totalSpent": 0, "averageOrderValue": 0}
    total_spent = sum(o.get("total") or 0 for o in orders)
    return {
        "totalOrders": len(orders),
        "totalSpent": total_spent,
        "lastOrderDate": orders[0].get("createdAt"),
        "averageOrderValue": total_spent / len(orders),
    }


def _user_or_404(user_id: str):
    oid = object_id(user_id)
    if oid is None:
        raise HTTPException(400, "Invalid user ID")
    user = _collection("users").find_one({"_id": oid})
    if not user:
        raise HTTPException(404, "User not found")
    return user


@app.get("/api/users")
def list_users(
    page: int = 1,
    search: str = "",
    limit: int = USERS_PAGE_LIMIT,
    role: str = "",
    isActive: Optional[str] = None,
    sortBy: str = "createdAt",
    sortOrder: str = "desc",
    admin=Depends(get_current_admin),
):
    page_limit = min(limit, USERS_MAX_LIMIT) if limit > 0 else USERS_PAGE_LIMIT
    query: Dict[str, Any] = {}
    search = search.strip()
    if search:
        query["$or"] = [{"name": _regex(search)}, {"email": _regex(search)}, {"phone": _regex(search)}]
    if role:
        query["role"] = role
    if isActive is not None:
        query["isActive"] = isActive == "true"

    users, total_count, total_pages, page = paginate(
        _collection("users"), query, page, page_limit,
        sort=(sortBy, 1 if sortOrder == "asc" else -1),
        projection={"passwordHash": 0},
    )
    return {
        "users": [_format_user(u) for u in users],
        "totalPages": total_pages,
        "currentPage": page,
        "totalCount": total_count,
        "pageLimit": page_limit,
    }


@app.get("/api/users/stats")
def user_stats(admin=Depends(get_current_admin)):
    users = _collection("users")
    by_role = users.aggregate([{"$group": {"_id": "$role", "count": {"$sum": 1}}}])
    # stored dates read back as naive UTC
    thirty_days_ago = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=30)
    top_users = users.find({}, {"passwordHash": 0}).sort("totalSpent", -1).limit(5)
    return {
        "totalUsers": users.count_documents({}),
        "activeUsers": users.count_documents({"isActive": True}),
        "usersByRole": {row["_id"]: row["count"] for row in by_role},
        "newUsers": users.count_documents({"createdAt": {"$gte": thirty_days_ago}}),
        "topUsers": [_format_user(u) for u in top_users],
    }


@app.get("/api/users/{user_id}")
def get_user(user_id: str, admin=Depends(get_current_admin)):
    user = _user_or_404(user_id)
    stats = _user_order_stats(user["_id"])
    recent = _collection("orders").find({"userId": user["_id"]}).sort("createdAt", -1).limit(5)
    _collection("users").update_one(
        {"_id": user["_id"]},
        {"$set": {"totalOrders": stats["totalOrders"], "totalSpent": stats["totalSpent"]}},
    )
    return {**_format_user(user), "orderStats": serialize(stats), "recentOrders": [serialize(o) for o in recent]}


@app.put("/api/users/{user_id}")
def update_user(user_id: str, payload: UserUpdate, admin=Depends(get_current_admin)):
    changes = {k: v for k, v in payload.model_dump().items() if v is not None}
    if not changes:
        raise HTTPException(400, "No update fields provided")

    users = _collection("users")
    existing = _user_or_404(user_id)
    update: Dict[str, Any] = {"updatedAt": datetime.now(timezone.utc)}

    name = (changes.get("name") or "").strip()
    if name and name != existing.get("name"):
        update["name"] = name

    email = (changes.get("email") or "").strip().lower()
    if email and email != existing.get("email"):
        if users.find_one({"_id": {"$ne": existing["_id"]}, "email": email}):
            raise HTTPException(409, "A user with this email already exists")
        update["email"] = email
        update["emailVerified"] = False

    if "phone" in changes:
        update["phone"] = changes["phone"].strip()

    role = changes.get("role")
    if role and role != existing.get("role"):
        if role not in rules.USER_ROLES:
            raise HTTPException(400, "Invalid role specified")
        update["role"] = role

    if "isActive" in changes:
        update["isActive"] = bool(changes["isActive"])
    if "avatar" in changes:
        update["avatar"] = changes["avatar"]
    if "addresses" in changes:
        update["addresses"] = changes["addresses"]
    if "isAdmin" in changes:
        update["isAdmin"] = 1 if changes["isAdmin"] else 0

    users.update_one({"_id": existing["_id"]}, {"$set": update})
    stats = _user_order_stats(existing["_id"])
    users.update_one(
        {"_id": existing["_id"]},
        {"$set": {"totalOrders": stats["totalOrders"], "totalSpent": stats["totalSpent"]}},
    )
    logger.info(f"Updated user {existing.get('email')}: {sorted(k for k in update if k != 'updatedAt')}")
    user = _format_user(users.find_one({"_id": existing["_id"]}))
    return {"success": True, "message": "User updated successfully", "user": {**user, "orderStats": serialize(stats)}}


@app.patch("/api/users/{user_id}/status")
def change_user_status(user_id: str, payload: UserStatusChange, admin=Depends(get_current_admin)):
    existing = _user_or_404(user_id)
    users = _collection("users")
    users.update_one(
        {"_id": existing["_id"]},
        {"$set": {"isActive": payload.isActive, "updatedAt": datetime.now(timezone.utc)}},
    )
    logger.info(f"User {existing.get('email')} {'activated' if payload.isActive else 'deactivated'}")
    return _format_user(users.find_one({"_id": existing["_id"]}))


@app.delete("/api/users/{user_id}")
def delete_user(user_id: str, admin=Depends(get_current_admin)):
    existing = _user_or_404(user_id)
    order_count = _collection("orders").count_documents({"userId": existing["_id"]})
    if order_count > 0:
        return JSONResponse(
            {"error": "Cannot delete user with associated orders", "orderCount": order_count},
            status_code=400,
        )
    _collection("users").delete_one({"_id": existing["_id"]})
    logger.info(f"Deleted user {existing.get('email')}")
    return {"success": True, "message": "User deleted successfully"}


# Products public endpoints

PRODUCT_SEARCH_FIELDS = ("name", "brand", "description", "summary", "sku")


@app.get("/api/products")
def list_products(
    page: int = 1,
    search: str = "",
    limit: int = PRODUCTS_PAGE_LIMIT,
    gender: str = "",
    brand: List[str] = Query([]),
    category: List[str] = Query([]),
    sortBy: str = "createdAt",
    sortOrder: str = "desc",
):
    page_limit = limit if limit > 0 else PRODUCTS_PAGE_LIMIT
    query: Dict[str, Any] = {}
    search = search.strip()
    if search:
        query["$or"] = [{field: _regex(search)} for field in PRODUCT_SEARCH_FIELDS]
    if gender and gender != "all":
        query["gender"] = gender
    if brand:
        query["brand"] = {"$in": brand}
    if category:
        query["category"] = {"$in": category}

    products, total_count, total_pages, page = paginate(
        _collection("products"), query, page, page_limit,
        sort=(sortBy, 1 if sortOrder == "asc" else -1),
    )
    return {
        "products": products,
        "totalPages": total_pages,
        "currentPage": page,
        "totalCount": total_count,
        "pageLimit": page_limit,
    }


@app.get("/api/products/{slug}")
def get_product(slug: str):
    matches: List[Dict[str, Any]] = [{"slug": {"$regex": f"^{re.escape(slug)}$", "$options": "i"}}]
    oid = object_id(slug)
    if oid is not None:
        matches.append({"_id": oid})
    product = _collection("products").find_one({"$or": matches})
    if not product:
        raise HTTPException(404, "Product not found")
    return serialize(product)


# Simple health and db test
@app.get("/test")
def test_database():
    if db is None:
        return {"backend": "ok", "db": "not configured"}
    try:
        collections = db.list_collection_names()
        return {"backend": "ok", "db": "ok", "collections": collections}
    except Exception as e:
        return {"backend": "ok", "db": f"error: {str(e)}"}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
