"""Tests for Purchase API endpoints."""


def test_create_purchase_success(client, create_product):
    """Test recording a purchase increments stock."""
    product = create_product("Widget", quantity=10)

    response = client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 5, "unitPrice": 4.00}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["productName"] == "Widget"
    assert data["quantityPurchased"] == 5
    assert data["totalPrice"] == 20.00
    assert "purchaseDate" in data

    assert client.get(f"/api/products/{product['id']}").json()["quantity"] == 15


def test_create_purchase_product_not_found(client):
    response = client.post(
        "/api/purchases",
        json={"productId": 9999, "quantityPurchased": 1, "unitPrice": 1.00}
    )

    assert response.status_code == 404


def test_create_purchase_invalid_quantity(client, create_product):
    product = create_product("Widget")

    response = client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 0, "unitPrice": 1.00}
    )

    assert response.status_code == 400


def test_purchase_allows_large_restock(client, create_product):
    product = create_product("Widget", quantity=0, min_stock_level=0)

    response = client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 1_000_000, "unitPrice": 0.01}
    )

    assert response.status_code == 201
    assert client.get(f"/api/products/{product['id']}").json()["quantity"] == 1_000_000


def test_purchase_past_maximum_quantity_is_rejected(client, create_product):
    """Test a restock that would overflow the stored quantity changes nothing."""
    product = create_product("Widget", quantity=2**31 - 1, min_stock_level=0)

    response = client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 1, "unitPrice": 1.00}
    )

    assert response.status_code == 400
    assert "Widget" in response.json()["message"]
    assert client.get(f"/api/products/{product['id']}").json()["quantity"] == 2**31 - 1
    assert client.get("/api/purchases").json() == []


def test_create_purchase_oversized_quantity(client, create_product):
    product = create_product("Widget", quantity=0)

    response = client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 10**20, "unitPrice": 1.00}
    )

    assert response.status_code == 400
    assert "quantityPurchased" in response.json()["message"]
    assert client.get(f"/api/products/{product['id']}").json()["quantity"] == 0


def test_create_purchase_rejects_sub_cent_price(client, create_product):
    product = create_product("Widget", quantity=0)

    response = client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 3, "unitPrice": 0.125}
    )

    assert response.status_code == 400
    assert "unitPrice" in response.json()["message"]
    assert client.get("/api/purchases").json() == []


def test_sale_then_purchase_restores_quantity(client, create_product):
    """Test a sale and a purchase of the same size cancel out."""
    product = create_product("Widget", quantity=10)

    client.post(
        "/api/sales",
        json={"productId": product["id"], "quantitySold": 4, "unitPrice": 9.00}
    )
    client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 4, "unitPrice": 5.00}
    )

    assert client.get(f"/api/products/{product['id']}").json()["quantity"] == 10


def test_list_purchases_newest_first(client, create_product):
    product = create_product("Widget")

    client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 1, "unitPrice": 1.00,
              "purchaseDate": "2024-01-01T10:00:00"}
    )
    client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 2, "unitPrice": 1.00,
              "purchaseDate": "2024-05-01T10:00:00"}
    )

    response = client.get("/api/purchases")

    assert response.status_code == 200
    assert [p["quantityPurchased"] for p in response.json()] == [2, 1]


def test_purchases_summary(client, create_product):
    product = create_product("Widget")
    client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 5, "unitPrice": 4.00}
    )

    response = client.get("/api/purchases/summary")

    assert response.status_code == 200
    assert response.json() == {"count": 1, "unitsPurchased": 5, "totalCost": 20.00}
