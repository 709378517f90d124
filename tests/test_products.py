# tests/test_products.py
from bson import ObjectId


def test_create_then_list(client):
    r = client.post("/products", json={"name": "Lamp", "price": 19.99, "stock": 4})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Product created"
    created = body["product"]
    assert ObjectId.is_valid(created["_id"])

    listed = client.get("/product").json()
    match = [p for p in listed if p["_id"] == created["_id"]]
    assert match == [{"_id": created["_id"], "name": "Lamp", "price": 19.99, "stock": 4}]


def test_create_reports_every_bad_field(client):
    r = client.post("/products", json={"name": "", "price": "cheap", "stock": -1})
    assert r.status_code == 400
    errors = r.json()["errors"]
    assert [(e["path"], e["msg"]) for e in errors] == [
        ("name", "Name is required"),
        ("price", "Price must be a number"),
        ("stock", "Stock must be a non-negative integer"),
    ]
    assert all(e["location"] == "body" for e in errors)
    assert client.get("/product").json() == []


def test_create_missing_fields(client):
    r = client.post("/products", json={})
    assert r.status_code == 400
    assert len(r.json()["errors"]) == 3


def test_create_rejects_fractional_stock_and_boolean_price(client):
    r = client.post("/products", json={"name": "X", "price": True, "stock": 2.5})
    assert r.status_code == 400
    paths = [e["path"] for e in r.json()["errors"]]
    assert paths == ["price", "stock"]


def test_create_accepts_numeric_strings(client):
    r = client.post("/products", json={"name": "Pen", "price": "1.25", "stock": "7"})
    assert r.status_code == 200
    product = r.json()["product"]
    assert product["price"] == 1.25
    assert product["stock"] == 7


def test_malformed_json_is_a_400(client):
    r = client.post("/products", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert "errors" in r.json()


def test_get_product(client, make_product):
    p = make_product(name="Cup")
    r = client.get(f"/products/{p['_id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "Cup"

    assert client.get(f"/products/{ObjectId()}").status_code == 404
    assert client.get("/products/not-an-id").json() == {"error": "Product not found"}


def test_update_changes_targeted_fields(client, make_product):
    p = make_product(name="Old", price=1, stock=1)
    other = make_product(name="Other", price=2, stock=2)

    r = client.put(f"/products/{p['_id']}", json={"name": "New", "price": 3.5, "stock": 9})
    assert r.status_code == 200
    assert r.json() == {
        "message": "Product updated",
        "product": {"_id": p["_id"], "name": "New", "price": 3.5, "stock": 9},
    }
    assert client.get(f"/products/{other['_id']}").json() == other


def test_update_missing_product(client):
    payload = {"name": "New", "price": 1, "stock": 1}
    r = client.put(f"/products/{ObjectId()}", json=payload)
    assert r.status_code == 404
    assert r.json() == {"error": "Product not found"}

    r = client.put("/products/123", json=payload)
    assert r.status_code == 404


def test_update_validates_before_lookup(client):
    r = client.put(f"/products/{ObjectId()}", json={"name": "", "price": 1, "stock": 1})
    assert r.status_code == 400
    assert r.json()["errors"][0]["msg"] == "Name is required"


def test_delete_is_idempotent(client, make_product):
    p = make_product()
    for _ in range(2):
        r = client.delete(f"/products/{p['_id']}")
        assert r.status_code == 200
        assert r.json() == {"message": "Product deleted"}
    assert client.get("/product").json() == []

    assert client.delete("/products/garbage").status_code == 200


def test_out_of_range_integers_are_field_errors(client):
    r = client.post("/products", json={"name": "Big", "price": "99999999999999999999", "stock": 2 ** 63})
    assert r.status_code == 400
    assert [e["path"] for e in r.json()["errors"]] == ["price", "stock"]

    r = client.post("/products", json={"name": "Max", "price": 1, "stock": str(2 ** 63 - 1)})
    assert r.status_code == 200
