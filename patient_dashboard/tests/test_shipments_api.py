"""
API tests for shipments, including the admin-only mode.
"""

import uuid

import pytest

API = "/api/v1"
SHIPMENTS = f"{API}/shipments"
PASSWORD = "Secret123"

ITEMS = [{"name": "Metformin 500mg", "quantity": 2, "price": 12.5}]


def create_shipment(client, headers, **overrides):
    body = {"items": ITEMS}
    body.update(overrides)
    return client.post(SHIPMENTS, json=body, headers=headers)


def register(client, role=None):
    body = {
        "email": f"user-{uuid.uuid4().hex[:8]}@example.com",
        "password": PASSWORD,
        "name": "Sam Smith",
        "dob": "1980-02-02",
    }
    if role:
        body["role"] = role
    token = client.post(f"{API}/auth/register", json=body).json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


def test_create_defaults_to_pending(client, user_headers):
    response = create_shipment(client, user_headers, trackingNumber=" TRK-12345 ")

    assert response.status_code == 201
    shipment = response.json()["data"]
    assert shipment["status"] == "pending"
    assert shipment["trackingNumber"] == "TRK-12345"
    assert shipment["items"] == [{"name": "Metformin 500mg", "quantity": 2, "price": 12.5}]
    assert shipment["shippedAt"] is None


@pytest.mark.parametrize("overrides", [
    {"items": []},
    {"items": [{"name": "Pills", "quantity": 0}]},
    {"items": [{"name": "Pills", "quantity": 1, "price": -1}]},
    {"items": [{"quantity": 1}]},
    {"status": "lost"},
    {"trackingNumber": "AB"},
    {"trackingNumber": "TRK 12345!"},
    {"shippedAt": "2024-01-05", "deliveredAt": "2024-01-04"},
])
def test_create_validation(client, user_headers, overrides):
    response = create_shipment(client, user_headers, **overrides)

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_delayed_is_a_valid_status(client, user_headers):
    response = create_shipment(client, user_headers, status="delayed")

    assert response.status_code == 201
    assert response.json()["data"]["status"] == "delayed"


def test_status_update_and_delivery_order(client, user_headers):
    shipment_id = create_shipment(client, user_headers).json()["data"]["id"]

    shipped = client.put(
        f"{SHIPMENTS}/{shipment_id}",
        json={"status": "shipped", "shippedAt": "2024-01-05T10:00:00Z"},
        headers=user_headers,
    )
    too_early = client.put(
        f"{SHIPMENTS}/{shipment_id}",
        json={"status": "delivered", "deliveredAt": "2024-01-04T10:00:00Z"},
        headers=user_headers,
    )
    delivered = client.put(
        f"{SHIPMENTS}/{shipment_id}",
        json={"status": "delivered", "deliveredAt": "2024-01-07T10:00:00Z"},
        headers=user_headers,
    )

    assert shipped.status_code == 200
    assert shipped.json()["data"]["status"] == "shipped"
    assert too_early.status_code == 400
    assert too_early.json()["errors"][0]["field"] == "deliveredAt"
    assert delivered.status_code == 200
    assert delivered.json()["data"]["deliveredAt"] == "2024-01-07T10:00:00.000Z"


def test_update_rejects_null_status_and_empty_items(client, user_headers):
    shipment_id = create_shipment(client, user_headers).json()["data"]["id"]

    assert client.put(f"{SHIPMENTS}/{shipment_id}", json={"status": None}, headers=user_headers).status_code == 400
    assert client.put(f"{SHIPMENTS}/{shipment_id}", json={"items": []}, headers=user_headers).status_code == 400


def test_foreign_shipment_is_not_found(client, user_headers, other_user_headers):
    shipment_id = create_shipment(client, user_headers).json()["data"]["id"]

    response = client.get(f"{SHIPMENTS}/{shipment_id}", headers=other_user_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Shipment not found"


def test_admin_can_manage_any_shipment(client, user_headers, admin_headers):
    shipment_id = create_shipment(client, user_headers).json()["data"]["id"]

    updated = client.put(f"{SHIPMENTS}/{shipment_id}", json={"status": "cancelled"}, headers=admin_headers)
    deleted = client.delete(f"{SHIPMENTS}/{shipment_id}", headers=admin_headers)

    assert updated.status_code == 200
    assert updated.json()["data"]["status"] == "cancelled"
    assert deleted.status_code == 200
    assert client.get(f"{SHIPMENTS}/{shipment_id}", headers=user_headers).status_code == 404


def test_status_filter_and_sort(client, user_headers):
    create_shipment(client, user_headers)
    create_shipment(client, user_headers, status="shipped", shippedAt="2024-01-02")
    create_shipment(client, user_headers, status="shipped", shippedAt="2024-01-09")

    shipped = client.get(
        SHIPMENTS,
        params={"status": "shipped", "sortBy": "shippedAt", "sortOrder": "asc"},
        headers=user_headers,
    ).json()

    assert shipped["pagination"]["total"] == 2
    assert [s["shippedAt"][:10] for s in shipped["data"]] == ["2024-01-02", "2024-01-09"]


def test_unknown_status_filter_rejected(client, user_headers):
    response = client.get(SHIPMENTS, params={"status": "lost"}, headers=user_headers)

    assert response.status_code == 400


def test_admin_only_mode(client_factory):
    client = client_factory(SHIPMENTS_ADMIN_ONLY=True)
    user = register(client)
    admin = register(client, role="admin")

    denied = client.get(SHIPMENTS, headers=user)

    assert denied.status_code == 403
    assert denied.json()["error"] == "Insufficient permissions"
    assert client.get(SHIPMENTS, headers=admin).status_code == 200
    assert create_shipment(client, admin).status_code == 201


def test_update_stores_items_in_create_shape(client, user_headers):
    body_items = [{"name": "Pen needles", "quantity": 2}]
    created = create_shipment(client, user_headers, items=body_items).json()["data"]

    updated = client.put(
        f"{SHIPMENTS}/{created['id']}", json={"items": body_items}, headers=user_headers
    )
    fetched = client.get(f"{SHIPMENTS}/{created['id']}", headers=user_headers).json()["data"]

    assert updated.status_code == 200
    assert created["items"] == [{"name": "Pen needles", "quantity": 2, "price": None}]
    assert updated.json()["data"]["items"] == created["items"]
    assert fetched["items"] == created["items"]
