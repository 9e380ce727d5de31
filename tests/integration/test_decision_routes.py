from datetime import date

import pytest

from app.infrastructure.db.database import get_db
from app.infrastructure.db.models import AccountModel, DebtModel, ScheduledIncomeModel, UserModel
from app.services.plan_gate import TEASER


async def _seed(session_factory, user_id, plan="free", plan_expires_at=None):
    async with session_factory() as session:
        session.add_all([
            UserModel(id=user_id, email=f"{user_id}@example.com", plan=plan, plan_expires_at=plan_expires_at),
            AccountModel(id=f"{user_id}-a1", user_id=user_id, name="Nómina", type="checking", current_balance_cents=20000),
            ScheduledIncomeModel(id=f"{user_id}-i1", user_id=user_id, name="Quincena", next_pay_date=date(2026, 10, 27)),
        ])
        await session.commit()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    assert (await client.get("/health")).json() == {"status": "ok"}

    ready = await client.get("/ready")
    assert ready.status_code == 200
    assert ready.json()["db_connected"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_decision_requires_user_header(client):
    resp = await client.get("/api/v1/decision")
    assert resp.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_free_user_gets_redacted_decision(client, session_factory):
    await _seed(session_factory, "free-user")

    resp = await client.get("/api/v1/decision", headers={"X-User-Id": "free-user"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["isPaid"] is False
    assert data["riskLevel"] == "safe"
    assert data["hoursRemaining"] == 0
    assert data["teaser"] == TEASER
    assert data["hasExpiredDecision"] is False
    assert "primaryCommand" not in data
    assert "context" not in data


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_user_is_served_as_free(client):
    resp = await client.get("/api/v1/decision", headers={"X-User-Id": "ghost"})

    assert resp.status_code == 200
    assert resp.json()["data"]["isPaid"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_paid_user_gets_full_decision(client, session_factory):
    await _seed(session_factory, "pro-user", plan="pro")

    resp = await client.get("/api/v1/decision", headers={"X-User-Id": "pro-user"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["isPaid"] is True
    assert data["riskLevel"] == "safe"
    assert data["primaryCommand"]["type"] == "spend"
    # 20000 over 10 days, one week of it
    assert data["primaryCommand"]["amountCents"] == 14000
    assert data["nextAction"] == {"text": "Entendido", "url": "/dashboard"}
    assert data["hoursRemaining"] == 14
    assert data["context"]["cashAvailable"] == 20000
    assert data["context"]["daysUntilPay"] == 10
    assert data["context"]["dailyBudget"] == 2000
    assert data["expiresAt"] > data["computedAt"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_lapsed_plan_is_served_as_free(client, session_factory):
    await _seed(session_factory, "lapsed-user", plan="premium", plan_expires_at=1)

    resp = await client.get("/api/v1/decision", headers={"X-User-Id": "lapsed-user"})

    assert resp.json()["data"]["isPaid"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_refresh_replaces_cached_decision(client, session_factory):
    await _seed(session_factory, "pro-user", plan="pro")
    headers = {"X-User-Id": "pro-user"}

    first = (await client.get("/api/v1/decision", headers=headers)).json()["data"]
    cached = (await client.get("/api/v1/decision", headers=headers)).json()["data"]
    refreshed = (await client.get("/api/v1/decision?refresh=true", headers=headers)).json()["data"]

    assert cached["id"] == first["id"]
    assert cached["hasExpiredDecision"] is False
    assert refreshed["id"] != first["id"]
    assert refreshed["hasExpiredDecision"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_acknowledge(client, session_factory):
    await _seed(session_factory, "pro-user", plan="pro")
    headers = {"X-User-Id": "pro-user"}
    decision_id = (await client.get("/api/v1/decision", headers=headers)).json()["data"]["id"]

    resp = await client.post("/api/v1/decision/acknowledge", json={"decisionId": decision_id}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    again = await client.post("/api/v1/decision/acknowledge", json={"decisionId": decision_id}, headers=headers)
    assert again.json() == {"success": True}

    unknown = await client.post("/api/v1/decision/acknowledge", json={"decisionId": "nope"}, headers=headers)
    assert unknown.json() == {"success": True}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_acknowledge_validates_body(client):
    resp = await client.post(
        "/api/v1/decision/acknowledge",
        json={"decisionId": ""},
        headers={"X-User-Id": "pro-user"},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_store_failure_is_a_generic_500(client, manager, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("database is down")

    monkeypatch.setattr(manager, "get_or_compute", broken)

    resp = await client.get("/api/v1/decision", headers={"X-User-Id": "ghost"})

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Failed to get decision"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_negative_apr_debt_does_not_break_the_decision(client, session_factory):
    await _seed(session_factory, "pro-user", plan="pro")
    async with session_factory() as session:
        session.add(DebtModel(
            id="bad-debt", user_id="pro-user", name="Corrupta",
            current_balance_cents=5000, apr_percent=-3.0,
        ))
        await session.commit()

    resp = await client.get("/api/v1/decision", headers={"X-User-Id": "pro-user"})

    assert resp.status_code == 200
    assert resp.json()["data"]["primaryCommand"]["type"] == "spend"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_decision_routes_do_not_hold_a_request_session(app, client, session_factory):
    await _seed(session_factory, "pro-user", plan="pro")

    def request_scoped_session():
        raise AssertionError("decision routes open short-lived sessions only")

    app.dependency_overrides[get_db] = request_scoped_session
    headers = {"X-User-Id": "pro-user"}

    resp = await client.get("/api/v1/decision", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["isPaid"] is True

    decision_id = resp.json()["data"]["id"]
    ack = await client.post("/api/v1/decision/acknowledge", json={"decisionId": decision_id}, headers=headers)
    assert ack.json() == {"success": True}
