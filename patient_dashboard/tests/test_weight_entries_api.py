"""
API tests for weight entries: CRUD, ownership, pagination, filters and the
period summary.
"""

import datetime
import uuid

import pytest

API = "/api/v1"
WEIGHTS = f"{API}/weight-entries"


def days_ago(days: int) -> str:
    moment = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(days=days)
    return moment.replace(microsecond=0).isoformat()


def create_entry(client, headers, weight=180, recorded_at="2024-01-01", **extra):
    body = {"weight": weight, "recordedAt": recorded_at}
    body.update(extra)
    return client.post(WEIGHTS, json=body, headers=headers)


def test_register_login_record_and_list_scenario(client):
    register = client.post(f"{API}/auth/register", json={
        "email": "a@x.com",
        "password": "Secret123!",
        "name": "A B",
        "dob": "1990-01-01",
    })
    assert register.status_code == 201
    registered = register.json()["data"]
    assert registered["token"] and registered["refreshToken"]
    assert "passwordHash" not in registered["user"]

    login = client.post(f"{API}/auth/login", json={"email": "a@x.com", "password": "Secret123!"})
    assert login.status_code == 200
    tokens = login.json()["data"]
    assert tokens["token"] != registered["token"]
    headers = {"Authorization": f"Bearer {tokens['token']}"}

    first = create_entry(client, headers, weight=180, recorded_at="2024-01-01")
    assert first.status_code == 201
    assert first.json()["data"]["recordedAt"] == "2024-01-01T00:00:00.000Z"

    duplicate = create_entry(client, headers, weight=180, recorded_at="2024-01-01")
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "Weight entry already exists for this date"

    listing = client.get(WEIGHTS, params={"page": 1, "limit": 10}, headers=headers)
    assert listing.status_code == 200
    body = listing.json()
    assert len(body["data"]) == 1
    assert body["pagination"]["total"] == 1


def test_create_defaults_recorded_at_to_now(client, user_headers):
    response = client.post(WEIGHTS, json={"weight": 72.5, "notes": "morning"}, headers=user_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    recorded = datetime.datetime.fromisoformat(data["recordedAt"].replace("Z", "+00:00"))
    assert abs(datetime.datetime.now(datetime.timezone.utc) - recorded) < datetime.timedelta(minutes=1)
    assert data["notes"] == "morning"


def test_create_ignores_client_supplied_owner(client, user_headers, register_user):
    victim = register_user()

    response = create_entry(client, user_headers, userId=victim["user"]["id"])

    assert response.status_code == 201
    assert response.json()["data"]["userId"] != victim["user"]["id"]


@pytest.mark.parametrize("body, field", [
    ({"weight": 0}, "weight"),
    ({"weight": 1000.5}, "weight"),
    ({"weight": "heavy"}, "weight"),
    ({"weight": 80, "recordedAt": "2999-01-01"}, "recordedAt"),
    ({"weight": 80, "recordedAt": "not a date"}, "recordedAt"),
    ({"weight": 80, "notes": "x" * 501}, "notes"),
    ({}, "weight"),
])
def test_create_validation(client, user_headers, body, field):
    response = client.post(WEIGHTS, json=body, headers=user_headers)

    assert response.status_code == 400
    assert field in [error["field"] for error in response.json()["errors"]]


def test_requires_authentication(client):
    assert client.get(WEIGHTS).status_code == 401
    assert client.post(WEIGHTS, json={"weight": 80}).status_code == 401


def test_entries_are_private_to_their_owner(client, user_headers, other_user_headers):
    entry_id = create_entry(client, user_headers).json()["data"]["id"]

    assert client.get(f"{WEIGHTS}/{entry_id}", headers=other_user_headers).status_code == 404
    assert client.put(f"{WEIGHTS}/{entry_id}", json={"weight": 1}, headers=other_user_headers).status_code == 404
    assert client.delete(f"{WEIGHTS}/{entry_id}", headers=other_user_headers).status_code == 404
    assert client.get(WEIGHTS, headers=other_user_headers).json()["pagination"]["total"] == 0
    assert client.get(f"{WEIGHTS}/{entry_id}", headers=user_headers).status_code == 200


def test_admin_sees_every_owner(client, user_headers, admin_headers):
    entry_id = create_entry(client, user_headers).json()["data"]["id"]

    assert client.get(f"{WEIGHTS}/{entry_id}", headers=admin_headers).status_code == 200
    assert client.get(WEIGHTS, headers=admin_headers).json()["pagination"]["total"] == 1


def test_missing_and_malformed_ids(client, user_headers):
    missing = client.get(f"{WEIGHTS}/{uuid.uuid4()}", headers=user_headers)
    malformed = client.get(f"{WEIGHTS}/not-an-id", headers=user_headers)

    assert missing.status_code == 404
    assert missing.json()["message"] == "Weight entry not found"
    assert malformed.status_code == 400


def test_update_entry(client, user_headers):
    entry = create_entry(client, user_headers, weight=90, notes="before").json()["data"]

    response = client.put(f"{WEIGHTS}/{entry['id']}", json={"weight": 88.4}, headers=user_headers)

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["weight"] == 88.4
    assert updated["notes"] == "before"
    assert updated["recordedAt"] == entry["recordedAt"]


def test_update_rejects_null_weight(client, user_headers):
    entry_id = create_entry(client, user_headers).json()["data"]["id"]

    response = client.put(f"{WEIGHTS}/{entry_id}", json={"weight": None}, headers=user_headers)

    assert response.status_code == 400


def test_update_onto_taken_date_is_conflict(client, user_headers):
    create_entry(client, user_headers, recorded_at="2024-01-01")
    second_id = create_entry(client, user_headers, recorded_at="2024-01-02").json()["data"]["id"]

    response = client.put(f"{WEIGHTS}/{second_id}", json={"recordedAt": "2024-01-01"}, headers=user_headers)

    assert response.status_code == 409


def test_same_date_allowed_for_different_users(client, user_headers, other_user_headers):
    assert create_entry(client, user_headers).status_code == 201
    assert create_entry(client, other_user_headers).status_code == 201


def test_delete_entry(client, user_headers):
    entry_id = create_entry(client, user_headers).json()["data"]["id"]

    response = client.delete(f"{WEIGHTS}/{entry_id}", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Weight entry deleted successfully"
    assert client.get(f"{WEIGHTS}/{entry_id}", headers=user_headers).status_code == 404


def test_pagination_walks_every_entry_once(client, user_headers):
    for day in range(1, 26):
        assert create_entry(client, user_headers, weight=70 + day, recorded_at=f"2024-01-{day:02d}").status_code == 201

    seen = []
    for page in (1, 2, 3):
        body = client.get(WEIGHTS, params={"page": page, "limit": 10}, headers=user_headers).json()
        seen.extend(entry["id"] for entry in body["data"])
        assert body["pagination"]["totalPages"] == 3

    assert len(seen) == 25
    assert len(set(seen)) == 25
    assert body["pagination"]["hasNext"] is False
    assert body["pagination"]["hasPrev"] is True


def test_default_sort_is_newest_first(client, user_headers):
    create_entry(client, user_headers, recorded_at="2024-01-01")
    create_entry(client, user_headers, recorded_at="2024-03-01")
    create_entry(client, user_headers, recorded_at="2024-02-01")

    data = client.get(WEIGHTS, headers=user_headers).json()["data"]

    assert [entry["recordedAt"][:10] for entry in data] == ["2024-03-01", "2024-02-01", "2024-01-01"]


def test_sort_by_weight_ascending(client, user_headers):
    for day, weight in enumerate([82, 79, 85], start=1):
        create_entry(client, user_headers, weight=weight, recorded_at=f"2024-01-0{day}")

    response = client.get(WEIGHTS, params={"sortBy": "weight", "sortOrder": "asc"}, headers=user_headers)

    assert [entry["weight"] for entry in response.json()["data"]] == [79, 82, 85]


def test_unknown_sort_field_rejected(client, user_headers):
    response = client.get(WEIGHTS, params={"sortBy": "notes"}, headers=user_headers)

    assert response.status_code == 400


def test_filters_combine(client, user_headers):
    create_entry(client, user_headers, weight=70, recorded_at="2024-01-05")
    create_entry(client, user_headers, weight=90, recorded_at="2024-01-10")
    create_entry(client, user_headers, weight=95, recorded_at="2024-02-10")

    by_date = client.get(WEIGHTS, params={"startDate": "2024-01-01", "endDate": "2024-01-31"}, headers=user_headers)
    by_weight = client.get(WEIGHTS, params={"minWeight": 80, "maxWeight": 92}, headers=user_headers)
    both = client.get(
        WEIGHTS,
        params={"startDate": "2024-01-01", "endDate": "2024-01-10", "minWeight": 80},
        headers=user_headers,
    )

    assert by_date.json()["pagination"]["total"] == 2
    assert [entry["weight"] for entry in by_weight.json()["data"]] == [90]
    assert [entry["weight"] for entry in both.json()["data"]] == [90]


def test_summary_for_week(client, user_headers, other_user_headers):
    create_entry(client, user_headers, weight=180, recorded_at=days_ago(3))
    create_entry(client, user_headers, weight=175, recorded_at=days_ago(1))
    create_entry(client, user_headers, weight=200, recorded_at=days_ago(30))
    create_entry(client, other_user_headers, weight=60, recorded_at=days_ago(2))

    response = client.get(f"{WEIGHTS}/stats/summary", params={"period": "week"}, headers=user_headers)

    assert response.status_code == 200
    summary = response.json()["data"]
    assert summary["period"] == "week"
    assert summary["totalEntries"] == 2
    assert summary["averageWeight"] == 177.5
    assert summary["weightChange"] == -5
    assert summary["weightChangePercentage"] == -2.78
    assert summary["firstEntry"]["weight"] == 180
    assert summary["lastEntry"]["weight"] == 175
    assert [entry["weight"] for entry in summary["entries"]] == [180, 175]


def test_summary_without_entries(client, user_headers):
    response = client.get(f"{WEIGHTS}/stats/summary", headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "No weight entries found for the specified period"
    assert body["data"]["period"] == "month"
    assert body["data"]["totalEntries"] == 0
    assert body["data"]["averageWeight"] == 0
    assert body["data"]["entries"] == []


def test_summary_rejects_unknown_period(client, user_headers):
    response = client.get(f"{WEIGHTS}/stats/summary", params={"period": "decade"}, headers=user_headers)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "period"
