def test_list_products_filters(api, make_product):
    make_product(name="Trail Runner", slug="trail-runner", brand="Acme", category="shoes")
    make_product(name="Court Classic", slug="court-classic", brand="Zenith", category="shoes", gender="women")
    make_product(name="Wool Cap", slug="wool-cap", brand="Acme", category="hats")

    everything = api.get("/api/products").json()
    assert everything["totalCount"] == 3
    assert everything["pageLimit"] == 6

    acme_shoes = api.get("/api/products", params={"brand": "Acme", "category": "shoes"}).json()
    assert [p["slug"] for p in acme_shoes["products"]] == ["trail-runner"]

    women = api.get("/api/products", params={"gender": "women"}).json()
    assert [p["slug"] for p in women["products"]] == ["court-classic"]

    assert api.get("/api/products", params={"gender": "all"}).json()["totalCount"] == 3


def test_list_products_search_and_sort(api, make_product):
    make_product(name="Cheap", slug="cheap", price=10)
    make_product(name="Dear", slug="dear", price=90, summary="premium leather")

    found = api.get("/api/products", params={"search": "LEATHER"}).json()
    assert [p["slug"] for p in found["products"]] == ["dear"]

    by_price = api.get("/api/products", params={"sortBy": "price", "sortOrder": "asc"}).json()
    assert [p["slug"] for p in by_price["products"]] == ["cheap", "dear"]


def test_product_detail_by_slug_or_id(api, make_product):
    product = make_product(slug="trail-runner")

    assert api.get("/api/products/Trail-Runner").json()["_id"] == str(product["_id"])
    assert api.get(f"/api/products/{product['_id']}").json()["slug"] == "trail-runner"

    missing = api.get("/api/products/nothing-here")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Product not found"}


def test_health_endpoints(api):
    assert api.get("/").json() == {"message": "Storefront Admin API Running"}
    body = api.get("/test").json()
    assert body["backend"] == "ok"
    assert body["db"] == "ok"
