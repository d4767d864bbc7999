"""End-to-end API tests: envelopes, caching headers and error mapping."""

from datetime import date, datetime, timedelta, timezone

import pytest

FLOOR_PLAN = {
    "property_id": "prop-1",
    "metadata": {
        "name": "Level 2",
        "level": 2,
        "total_area": 900.0,
        "usable_area": 750.0,
        "dimensions": {"width": 30, "height": 30, "scale": 1.0, "units": "meters"},
    },
}

LEASE = {
    "property_id": "prop-1",
    "tenant_id": "tenant-9",
    "start_date": "2024-01-01",
    "end_date": "2025-03-01",
    "monthly_rent": "2500.00",
    "terms": {"security_deposit": "5000.00", "payment_due_day": 5},
}

USER = {
    "email": "Sam.Lee@Example.com",
    "first_name": "Sam",
    "last_name": "Lee",
    "role": "SPACE_PLANNER",
    "business_unit": "bu-apac",
}


def _with(base: dict, **changes) -> dict:
    return {**base, **changes}


# ── Floor plans ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_floor_plan_envelope_and_headers(client):
    response = await client.post(
        "/api/v1/floor-plans", json=FLOOR_PLAN, headers={"X-User-Id": "alice"}
    )

    assert response.status_code == 201
    assert response.headers["cache-control"] == "private, max-age=0, no-cache"
    assert response.headers["etag"] == '"1"'
    body = response.json()
    assert body["success"] is True
    assert "timestamp" in body
    assert body["data"]["status"] == "DRAFT"
    assert body["data"]["created_by"] == "alice"
    assert body["data"]["version_info"]["label"] == "1.0.0"


@pytest.mark.asyncio
async def test_get_floor_plan_honours_if_none_match(client):
    created = (await client.post("/api/v1/floor-plans", json=FLOOR_PLAN)).json()["data"]
    url = f"/api/v1/floor-plans/{created['id']}"

    first = await client.get(url)
    assert first.status_code == 200
    assert first.headers["cache-control"] == "private, max-age=3600"
    assert first.json()["data"]["created_by"] == "system"

    second = await client.get(url, headers={"If-None-Match": first.headers["etag"]})
    assert second.status_code == 304
    assert second.content == b""


@pytest.mark.asyncio
async def test_update_floor_plan_and_reject_stale_version(client):
    created = (await client.post("/api/v1/floor-plans", json=FLOOR_PLAN)).json()["data"]
    url = f"/api/v1/floor-plans/{created['id']}"

    updated = await client.put(url, json={"version": 1, "status": "PUBLISHED"})
    assert updated.status_code == 200
    assert updated.headers["cache-control"] == "no-cache, no-store, must-revalidate"
    assert updated.headers["etag"] == '"2"'
    assert updated.json()["data"]["status"] == "PUBLISHED"

    stale = await client.put(url, json={"version": 1, "changelog": "late edit"})
    assert stale.status_code == 409
    assert stale.json()["success"] is False
    assert stale.json()["error"]["code"] == "VERSION_CONFLICT"


@pytest.mark.asyncio
async def test_business_rule_violation_returns_field_details(client):
    payload = _with(FLOOR_PLAN, metadata={**FLOOR_PLAN["metadata"], "usable_area": 1000.0})
    response = await client.post("/api/v1/floor-plans", json=payload)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"] == [
        {
            "field": "metadata.usable_area",
            "message": "Usable area cannot exceed total area",
            "code": "INVALID_AREA",
        }
    ]


@pytest.mark.asyncio
async def test_malformed_request_uses_error_envelope(client):
    metadata = {**FLOOR_PLAN["metadata"], "dimensions": {"width": -1, "height": 10}}
    response = await client.post("/api/v1/floor-plans", json=_with(FLOOR_PLAN, metadata=metadata))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"][0]["field"] == "metadata.dimensions.width"


@pytest.mark.asyncio
async def test_validate_endpoint_reports_warnings_without_saving(client):
    metadata = {
        **FLOOR_PLAN["metadata"],
        "dimensions": {"width": 900, "height": 10},
    }
    response = await client.post(
        "/api/v1/floor-plans/validate", json=_with(FLOOR_PLAN, metadata=metadata)
    )

    assert response.status_code == 200
    result = response.json()["data"]
    assert result["is_valid"] is True
    assert result["warnings"]
    listing = await client.get("/api/v1/floor-plans/property/prop-1")
    assert listing.json()["data"]["total"] == 0


@pytest.mark.asyncio
async def test_list_delete_and_not_found(client):
    ids = []
    for name in ("A", "B", "C"):
        payload = _with(FLOOR_PLAN, metadata={**FLOOR_PLAN["metadata"], "name": name})
        ids.append((await client.post("/api/v1/floor-plans", json=payload)).json()["data"]["id"])

    page = (await client.get("/api/v1/floor-plans/property/prop-1?page=1&limit=2")).json()["data"]
    assert page["total"] == 3
    assert page["total_pages"] == 2
    assert len(page["items"]) == 2

    deleted = await client.delete(f"/api/v1/floor-plans/{ids[0]}")
    assert deleted.status_code == 204
    page = (await client.get("/api/v1/floor-plans/property/prop-1?page=1&limit=2")).json()["data"]
    assert page["total"] == 2

    missing = await client.get("/api/v1/floor-plans/does-not-exist")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_bulk_create_floor_plans(client):
    response = await client.post("/api/v1/floor-plans/bulk", json={"items": [FLOOR_PLAN] * 2})
    assert response.status_code == 201
    assert len(response.json()["data"]) == 2


# ── Leases ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_lease_status_workflow(client):
    created = await client.post("/api/v1/leases", json=LEASE, headers={"X-User-Id": "bob"})
    assert created.status_code == 201
    lease = created.json()["data"]
    assert lease["status"] == "DRAFT"
    assert lease["monthly_rent"] == "2500.00"
    assert lease["audit_trail"][0]["user_id"] == "bob"

    url = f"/api/v1/leases/{lease['id']}/status"
    activated = await client.put(url, json={"status": "ACTIVE", "version": 1})
    assert activated.status_code == 200
    assert activated.json()["data"]["status"] == "ACTIVE"

    invalid = await client.put(url, json={"status": "DRAFT", "version": 2})
    assert invalid.status_code == 409
    assert invalid.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"

    active = (await client.get("/api/v1/leases/active")).json()["data"]
    assert [item["id"] for item in active] == [lease["id"]]


@pytest.mark.asyncio
async def test_lease_date_range_rule(client):
    response = await client.post(
        "/api/v1/leases", json=_with(LEASE, start_date="2025-01-01", end_date="2024-01-01")
    )
    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["code"] == "INVALID_DATE_RANGE"


@pytest.mark.asyncio
async def test_lease_rejects_negative_security_deposit(client):
    terms = {**LEASE["terms"], "security_deposit": "-5.00"}
    response = await client.post("/api/v1/leases", json=_with(LEASE, terms=terms))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert [d["field"] for d in body["error"]["details"]] == ["terms.security_deposit"]


@pytest.mark.asyncio
async def test_renewal_check_flags_expiring_leases(client):
    lease = (await client.post("/api/v1/leases", json=LEASE)).json()["data"]
    await client.put(
        f"/api/v1/leases/{lease['id']}/status", json={"status": "ACTIVE", "version": 1}
    )

    expiring = await client.get("/api/v1/leases/expiring", params={"within_days": 30})
    assert [item["id"] for item in expiring.json()["data"]] == [lease["id"]]

    as_of = (date(2025, 3, 1) - timedelta(days=30)).isoformat()
    checked = await client.post("/api/v1/leases/renewals/check", params={"as_of": as_of})
    assert checked.status_code == 200
    assert checked.json()["data"] == {"flagged": 1, "lease_ids": [lease["id"]]}

    stored = (await client.get(f"/api/v1/leases/{lease['id']}")).json()["data"]
    assert stored["status"] == "PENDING_RENEWAL"


@pytest.mark.asyncio
async def test_deleted_lease_is_kept_as_terminated(client):
    lease = (await client.post("/api/v1/leases", json=LEASE)).json()["data"]
    assert (await client.delete(f"/api/v1/leases/{lease['id']}")).status_code == 204

    stored = (await client.get(f"/api/v1/leases/{lease['id']}")).json()["data"]
    assert stored["is_deleted"] is True
    assert stored["status"] == "TERMINATED"
    listing = (await client.get("/api/v1/leases/property/prop-1")).json()["data"]
    assert listing == []


# ── Users ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_user_lifecycle(client):
    created = await client.post("/api/v1/users", json=USER)
    assert created.status_code == 201
    user = created.json()["data"]
    assert user["email"] == "sam.lee@example.com"
    assert user["full_name"] == "Sam Lee"

    duplicate = await client.post("/api/v1/users", json=_with(USER, email="sam.lee@example.com"))
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "DUPLICATE_ENTITY"

    by_email = await client.get("/api/v1/users/by-email", params={"email": "SAM.LEE@example.com"})
    assert by_email.json()["data"]["id"] == user["id"]

    secured = await client.put(
        f"/api/v1/users/{user['id']}/security",
        json={"version": 1, "mfa_enabled": True, "status": "ACTIVE"},
    )
    assert secured.status_code == 200
    assert secured.json()["data"]["security_preferences"]["mfa_enabled"] is True

    listed = (await client.get("/api/v1/users", params={"status": "ACTIVE"})).json()["data"]
    assert [u["id"] for u in listed] == [user["id"]]


@pytest.mark.asyncio
async def test_deleted_user_stays_inactive(client):
    user = (await client.post("/api/v1/users", json=USER)).json()["data"]
    padded = {"email": "  Sam.Lee@example.com "}
    assert (await client.get("/api/v1/users/by-email", params=padded)).status_code == 200

    assert (await client.delete(f"/api/v1/users/{user['id']}")).status_code == 204
    after_delete = (await client.get("/api/v1/users/by-email", params=padded)).json()["data"]
    assert after_delete["status"] == "INACTIVE"
    assert after_delete["is_active"] is False

    profile = await client.put(
        f"/api/v1/users/{user['id']}",
        json={"version": after_delete["version"], "department": "Ops", "status": "ACTIVE"},
    )
    assert profile.status_code == 200
    assert profile.json()["data"]["status"] == "INACTIVE"
    assert profile.json()["data"]["is_active"] is False


@pytest.mark.asyncio
async def test_failed_logins_lock_user(client):
    user = (await client.post("/api/v1/users", json=USER)).json()["data"]
    for _ in range(5):
        response = await client.post(f"/api/v1/users/{user['id']}/failed-login")
    assert response.json()["data"]["status"] == "LOCKED"

    reset = await client.post(f"/api/v1/users/{user['id']}/security/reset")
    assert reset.json()["data"]["failed_login_attempts"] == 0
    assert reset.json()["data"]["status"] == "ACTIVE"


# ── Occupancy ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_occupancy_update_current_and_trends(client):
    start = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0) - timedelta(
        hours=3
    )
    for minutes, count in [(0, 10), (20, 30), (70, 5)]:
        response = await client.post(
            "/api/v1/occupancy/update",
            json={
                "space_id": "space-7",
                "occupant_count": count,
                "capacity": 20,
                "timestamp": (start + timedelta(minutes=minutes)).isoformat(),
            },
        )
        assert response.status_code == 200

    current = await client.get("/api/v1/occupancy/space-7")
    assert current.headers["cache-control"] == "public, max-age=30"
    assert current.json()["data"]["occupant_count"] == 5
    assert current.json()["data"]["utilization_rate"] == 25.0

    trends = await client.get(
        "/api/v1/occupancy/space-7/trends",
        params={
            "start": start.isoformat(),
            "end": (start + timedelta(hours=3)).isoformat(),
            "interval": "hourly",
        },
    )
    assert trends.headers["cache-control"] == "public, max-age=300"
    data = trends.json()["data"]
    assert [p["sample_count"] for p in data["data_points"]] == [2, 1]
    assert data["peak_occupancy"] == 30
    assert data["anomalies"][0]["type"] == "over_capacity"


@pytest.mark.asyncio
async def test_occupancy_batch_reports_failures(client):
    timestamp = (datetime.now(timezone.utc) - timedelta(minutes=5)).isoformat()
    reading = {"space_id": "space-8", "occupant_count": 4, "capacity": 10, "timestamp": timestamp}
    response = await client.post(
        "/api/v1/occupancy/batch", json={"items": [reading, reading], "continue_on_error": True}
    )

    assert response.status_code == 200
    result = response.json()["data"]
    assert result["success_count"] == 1
    assert result["failure_count"] == 1
    assert result["errors"][0]["index"] == 1


@pytest.mark.asyncio
async def test_unknown_space_returns_404(client):
    response = await client.get("/api/v1/occupancy/unknown-space")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"
