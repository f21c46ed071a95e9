def test_create_product_with_sizes(client, product, collection):
    assert product["collection_id"] == collection["id"]
    assert product["is_listed"] is False
    assert sorted(size["label"] for size in product["sizes"]) == ["L", "M"]


def test_create_product_in_missing_collection_not_found(client, designer):
    response = client.post(
        "/api/products",
        json={"collection_id": 999, "name": "Ghost Tee", "price": 10},
        headers=designer["headers"],
    )
    assert response.status_code == 404


def test_create_product_in_foreign_collection_forbidden(client, other_designer, collection):
    response = client.post(
        "/api/products",
        json={"collection_id": collection["id"], "name": "Sneaky Tee", "price": 10},
        headers=other_designer["headers"],
    )
    assert response.status_code == 403


def test_create_product_rejects_negative_price(client, designer, collection):
    response = client.post(
        "/api/products",
        json={"collection_id": collection["id"], "name": "Bad Tee", "price": -1},
        headers=designer["headers"],
    )
    assert response.status_code == 400


def test_get_product_by_id(client, product):
    response = client.get(f"/api/products/{product['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Linen Shirt"


def test_get_product_with_malformed_id_is_bad_request(client):
    assert client.get("/api/products/not-a-number").status_code == 400


def test_update_product(client, designer, product):
    response = client.put(f"/api/products/{product['id']}", json={"price": 99}, headers=designer["headers"])
    assert response.status_code == 200
    assert response.json()["price"] == 99
    assert response.json()["name"] == "Linen Shirt"


def test_update_product_by_non_owner_forbidden(client, other_designer, product):
    response = client.put(f"/api/products/{product['id']}", json={"price": 1}, headers=other_designer["headers"])
    assert response.status_code == 403


def test_delete_product(client, designer, product):
    response = client.delete(f"/api/products/{product['id']}", headers=designer["headers"])
    assert response.status_code == 200
    assert client.get(f"/api/products/{product['id']}").status_code == 404
    assert client.get(f"/api/products/{product['id']}/sizes").status_code == 404


def test_delete_missing_product_not_found(client, designer):
    assert client.delete("/api/products/999", headers=designer["headers"]).status_code == 404


def test_collection_products_private_and_public(client, designer, other_designer, collection, product):
    private = client.get(f"/api/collections/{collection['id']}/products", headers=designer["headers"])
    assert private.status_code == 200
    assert private.json()[0]["is_listed"] is False

    foreign = client.get(f"/api/collections/{collection['id']}/products", headers=other_designer["headers"])
    assert foreign.status_code == 403

    public = client.get(f"/api/public/collections/{collection['id']}/products")
    assert public.status_code == 200
    assert [p["id"] for p in public.json()] == [product["id"]]
    assert "is_listed" not in public.json()[0]

    assert client.get("/api/public/collections/999/products").status_code == 404


def test_size_crud(client, designer, product):
    created = client.post(
        "/api/sizes",
        json={"product_id": product["id"], "label": "XL", "quantity": 1},
        headers=designer["headers"],
    )
    assert created.status_code == 201
    size_id = created.json()["id"]

    updated = client.put(f"/api/sizes/{size_id}", json={"quantity": 7}, headers=designer["headers"])
    assert updated.status_code == 200
    assert updated.json() == {"id": size_id, "product_id": product["id"], "label": "XL", "quantity": 7}

    assert client.get(f"/api/sizes/{size_id}").json()["quantity"] == 7

    labels = [s["label"] for s in client.get(f"/api/products/{product['id']}/sizes").json()]
    assert labels == ["M", "L", "XL"]

    assert client.delete(f"/api/sizes/{size_id}", headers=designer["headers"]).status_code == 200
    assert client.get(f"/api/sizes/{size_id}").status_code == 404


def test_add_size_to_missing_product_not_found(client, designer):
    response = client.post(
        "/api/sizes", json={"product_id": 999, "label": "S", "quantity": 1}, headers=designer["headers"]
    )
    assert response.status_code == 404


def test_delete_missing_size_not_found(client, designer):
    assert client.delete("/api/sizes/999", headers=designer["headers"]).status_code == 404


def test_size_changes_by_non_owner_forbidden(client, other_designer, product):
    size_id = product["sizes"][0]["id"]
    response = client.put(f"/api/sizes/{size_id}", json={"quantity": 0}, headers=other_designer["headers"])
    assert response.status_code == 403


def test_update_product_blank_name_rejected(client, designer, collection, product):
    response = client.put(f"/api/products/{product['id']}", json={"name": "  "}, headers=designer["headers"])
    assert response.status_code == 400

    public = client.get(f"/api/public/collections/{collection['id']}/products")
    assert public.status_code == 200
    assert public.json()[0]["name"] == "Linen Shirt"


def test_update_product_null_required_fields_rejected(client, designer, product):
    for field in ("name", "price"):
        response = client.put(f"/api/products/{product['id']}", json={field: None}, headers=designer["headers"])
        assert response.status_code == 400, f"{field}: {response.text}"

    assert client.get(f"/api/products/{product['id']}").json()["price"] == 79.5


def test_update_product_price_rounded(client, designer, product):
    response = client.put(f"/api/products/{product['id']}", json={"price": 12.3456}, headers=designer["headers"])
    assert response.status_code == 200
    assert response.json()["price"] == 12.35


def test_update_size_null_or_blank_rejected(client, designer, product):
    size_id = product["sizes"][0]["id"]
    for body in ({"quantity": None}, {"label": None}, {"label": "   "}):
        response = client.put(f"/api/sizes/{size_id}", json=body, headers=designer["headers"])
        assert response.status_code == 400, f"{body}: {response.text}"

    size = client.get(f"/api/sizes/{size_id}").json()
    assert (size["label"], size["quantity"]) == ("M", 4)
