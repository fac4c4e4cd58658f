from datetime import datetime, timezone

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

import database
import main

from support import ADMIN_EMAIL, ADMIN_PASSWORD


@pytest.fixture
def mongo(monkeypatch):
    db = mongomock.MongoClient()["storefront_test"]
    monkeypatch.setattr(database, "db", db)
    monkeypatch.setattr(main, "db", db)
    return db


@pytest.fixture
def admin_user(mongo):
    now = datetime.now(timezone.utc)
    doc = {
        "name": "Admin",
        "email": ADMIN_EMAIL,
        "phone": "",
        "role": "admin",
        "isAdmin": 1,
        "isActive": True,
        "addresses": [],
        "passwordHash": main.get_password_hash(ADMIN_PASSWORD),
        "totalOrders": 0,
        "totalSpent": 0,
        "createdAt": now,
        "updatedAt": now,
    }
    doc["_id"] = mongo.users.insert_one(doc).inserted_id
    return doc


@pytest.fixture
def api(mongo):
    """Client without any auth override."""
    return TestClient(main.app)


@pytest.fixture
def client(mongo, admin_user):
    main.app.dependency_overrides[main.get_current_user] = lambda: admin_user
    main.app.dependency_overrides[main.get_current_admin] = lambda: admin_user
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def make_user(mongo):
    def _make(**fields):
        now = datetime.now(timezone.utc)
        doc = {
            "name": "Customer",
            "email": f"{ObjectId()}@example.com",
            "phone": "01700000000",
            "role": "customer",
            "isAdmin": 0,
            "isActive": True,
            "addresses": [],
            "passwordHash": "x",
            "totalOrders": 0,
            "totalSpent": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        doc.update(fields)
        doc["_id"] = mongo.users.insert_one(doc).inserted_id
        return doc
    return _make


@pytest.fixture
def make_product(mongo):
    def _make(**fields):
        doc = {
            "name": "Runner",
            "slug": "runner",
            "brand": "Acme",
            "category": "shoes",
            "gender": "men",
            "sku": "RUN-1",
            "price": 100,
            "inventory": {"quantity": 10, "threshold": 3, "status": "in_stock"},
            "createdAt": datetime.now(timezone.utc),
        }
        doc.update(fields)
        doc["_id"] = mongo.products.insert_one(doc).inserted_id
        return doc
    return _make


@pytest.fixture
def coupon_payload():
    return {
        "name": "Summer Sale",
        "startDate": "2020-01-01",
        "endDate": "2099-12-31",
        "discountPercentage": 10,
        "discountedPrice": None,
    }


@pytest.fixture
def sign_in_as(client):
    """Make the API treat the given user as the signed-in shopper."""
    def _sign_in(user):
        main.app.dependency_overrides[main.get_current_user] = lambda: user
        return user
    return _sign_in
