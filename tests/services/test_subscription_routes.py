"""Subscription HTTP API: end-to-end tests through the FastAPI app.

Tests cover:
    - CRUD status codes and response bodies
    - 400 envelope for schema violations and domain validation
    - 404 envelope for unknown ids
    - List filters and paging clamps
    - Cost endpoint: YYYY-MM bounds, INVALID_RANGE, malformed input
    - Liveness and readiness probes
"""

import uuid
from datetime import date

import subscription_service.infrastructure.database as db_module

BASE = "/api/v1/subscriptions"


def _payload(**kw) -> dict:
    body = {
        "service_name": "Yandex Plus",
        "price": 400,
        "user_id": str(uuid.uuid4()),
        "start_date": "2025-01-01",
    }
    body.update(kw)
    return body


# ─── Create / read ───────────────────────────────────────────────

async def test_create_returns_201_with_record(client):
    payload = _payload(end_date="2025-12-31")
    resp = await client.post(BASE, json=payload)
    assert resp.status_code == 201
    data = resp.json()
    assert data["service_name"] == "Yandex Plus"
    assert data["user_id"] == payload["user_id"]
    assert data["end_date"] == "2025-12-31"
    uuid.UUID(data["id"])


async def test_create_zero_price_is_validation_error(client):
    resp = await client.post(BASE, json=_payload(price=0))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_create_oversized_price_is_400(client):
    resp = await client.post(BASE, json=_payload(price=10**15))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_create_missing_field_is_400(client):
    body = _payload()
    del body["start_date"]
    resp = await client.post(BASE, json=body)
    assert resp.status_code == 400
    details = resp.json()["error"]["details"]
    assert any("start_date" in d["field"] for d in details)


async def test_create_blank_end_date_is_open_ended(client):
    resp = await client.post(BASE, json=_payload(end_date=""))
    assert resp.status_code == 201
    assert resp.json()["end_date"] is None


async def test_get_existing(client, insert_subscription):
    row = await insert_subscription(service_name="Kinopoisk", price=299)
    resp = await client.get(f"{BASE}/{row.id}")
    assert resp.status_code == 200
    assert resp.json()["service_name"] == "Kinopoisk"


async def test_get_unknown_is_404(client):
    missing = uuid.uuid4()
    resp = await client.get(f"{BASE}/{missing}")
    assert resp.status_code == 404
    error = resp.json()["error"]
    assert error["code"] == "RESOURCE_NOT_FOUND"
    assert error["context"]["subscription_id"] == str(missing)


async def test_get_malformed_id_is_400(client):
    resp = await client.get(f"{BASE}/not-a-uuid")
    assert resp.status_code == 400


# ─── Update / delete ─────────────────────────────────────────────

async def test_put_is_partial(client, insert_subscription):
    row = await insert_subscription(price=400, end_date=date(2025, 6, 30))
    resp = await client.put(f"{BASE}/{row.id}", json={"price": 500})
    assert resp.status_code == 200
    data = resp.json()
    assert data["price"] == 500
    assert data["service_name"] == "Yandex Plus"
    assert data["end_date"] == "2025-06-30"


async def test_put_null_end_date_clears_it(client, insert_subscription):
    row = await insert_subscription(end_date=date(2025, 6, 30))
    resp = await client.put(f"{BASE}/{row.id}", json={"end_date": None})
    assert resp.status_code == 200
    assert resp.json()["end_date"] is None


async def test_put_null_service_name_rejected(client, insert_subscription):
    row = await insert_subscription()
    resp = await client.put(f"{BASE}/{row.id}", json={"service_name": None})
    assert resp.status_code == 400


async def test_put_unknown_is_404(client):
    resp = await client.put(f"{BASE}/{uuid.uuid4()}", json={"price": 1})
    assert resp.status_code == 404


async def test_delete_then_get_is_404(client, insert_subscription):
    row = await insert_subscription()
    resp = await client.delete(f"{BASE}/{row.id}")
    assert resp.status_code == 204
    assert resp.content == b""

    resp = await client.get(f"{BASE}/{row.id}")
    assert resp.status_code == 404


async def test_delete_unknown_is_404(client):
    resp = await client.delete(f"{BASE}/{uuid.uuid4()}")
    assert resp.status_code == 404


# ─── List ────────────────────────────────────────────────────────

async def test_list_filters_by_service_name(client, insert_subscription):
    await insert_subscription(service_name="Yandex Plus")
    await insert_subscription(service_name="Kinopoisk")

    resp = await client.get(BASE, params={"service_name": "plus"})
    assert resp.status_code == 200
    assert [s["service_name"] for s in resp.json()] == ["Yandex Plus"]


async def test_list_filters_by_user(client, insert_subscription):
    owner = uuid.uuid4()
    await insert_subscription(user_id=owner)
    await insert_subscription()

    resp = await client.get(BASE, params={"user_id": str(owner)})
    assert [s["user_id"] for s in resp.json()] == [str(owner)]


async def test_list_out_of_range_paging_is_clamped(client, insert_subscription):
    await insert_subscription()
    resp = await client.get(BASE, params={"limit": 5000, "offset": -5})
    assert resp.status_code == 200
    assert len(resp.json()) == 1


async def test_list_malformed_user_id_is_400(client):
    resp = await client.get(BASE, params={"user_id": "nope"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


# ─── Cost ────────────────────────────────────────────────────────

async def test_cost_end_to_end(client):
    created = await client.post(BASE, json=_payload())
    assert created.status_code == 201

    resp = await client.get(
        f"{BASE}/cost", params={"start_date": "2025-01", "end_date": "2025-06"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"total": 2400}


async def test_cost_accepts_full_dates(client, insert_subscription):
    await insert_subscription(price=50, start_date=date(2025, 1, 10))
    resp = await client.get(
        f"{BASE}/cost", params={"start_date": "2025-01-31", "end_date": "2025-03-15"},
    )
    assert resp.json() == {"total": 150}


async def test_cost_empty_store_is_zero(client):
    resp = await client.get(
        f"{BASE}/cost", params={"start_date": "2025-01", "end_date": "2025-12"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"total": 0}


async def test_cost_with_filters(client, insert_subscription):
    owner = uuid.uuid4()
    await insert_subscription(service_name="Yandex Plus", price=400, user_id=owner)
    await insert_subscription(service_name="Kinopoisk", price=300, user_id=owner)

    resp = await client.get(f"{BASE}/cost", params={
        "start_date": "2025-01", "end_date": "2025-02",
        "user_id": str(owner), "service_name": "kino",
    })
    assert resp.json() == {"total": 600}


async def test_cost_end_before_start_is_invalid_range(client):
    resp = await client.get(
        f"{BASE}/cost", params={"start_date": "2025-06", "end_date": "2025-01"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_RANGE"


async def test_cost_malformed_period_is_400(client):
    resp = await client.get(
        f"{BASE}/cost", params={"start_date": "2025-13", "end_date": "2025-14"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_cost_missing_period_is_400(client):
    resp = await client.get(f"{BASE}/cost", params={"start_date": "2025-01"})
    assert resp.status_code == 400


# ─── Health ──────────────────────────────────────────────────────

async def test_health_liveness(client):
    resp = await client.get("/api/v1/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


async def test_health_readiness(client):
    resp = await client.get("/api/v1/health/ready")
    assert resp.status_code == 200
    assert resp.json()["checks"]["database"] == "healthy"


async def test_health_readiness_without_database(client, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    resp = await client.get("/api/v1/health/ready")
    assert resp.status_code == 503
    assert resp.json()["checks"]["database"] == "unavailable"
