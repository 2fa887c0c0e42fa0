import pytest
from bson import ObjectId

from app.core.exceptions import PaymentProcessingFailed
from app.main import app
from app.routes.auth.dependencies import get_payment_gateway
from app.services.payment.gateways.factory import PaymentGatewayFactory
from app.services.payment.payment_service import PaymentService
from conftest import CREATOR, PARTICIPANT, auth, make_contest


async def start_checkout(client, contest, email=PARTICIPANT):
    return await client.post(
        "/create-checkout-session",
        headers=auth(email),
        json={"contest_id": str(contest["_id"])}
    )


async def test_paid_entry_settles_exactly_once(client, db, gateway, users):
    contest = await make_contest(db, contest_fee=20)

    response = await start_checkout(client, contest)
    assert response.status_code == 200
    session_id = response.json()["data"]["session_id"]

    created = gateway.created[0]
    assert created["line_item"].quantity == 1
    assert created["line_item"].unit_amount == 2000
    assert created["customer_email"] == PARTICIPANT
    assert created["metadata"] == {"contestId": str(contest["_id"]), "participant": PARTICIPANT}
    assert created["success_url"].endswith(f"contestId={contest['_id']}")
    assert "{CHECKOUT_SESSION_ID}" in created["success_url"]

    gateway.complete(session_id)
    first = await client.post("/payment-success", json={"session_id": session_id})
    second = await client.post("/payment-success", json={"session_id": session_id})

    assert first.status_code == 200
    assert second.status_code == 200
    first_data = first.json()["data"]
    assert first_data["transaction_id"] == f"pi_{session_id}"
    assert first_data["order_id"] is not None
    assert second.json()["data"] == first_data

    assert await db.orders.count_documents({}) == 1
    order = await db.orders.find_one({})
    assert order["participant"] == PARTICIPANT
    assert order["contest_fee"] == 20
    assert order["status"] == "Paid"
    assert order["contest_creator"]["email"] == CREATOR

    stored = await db.contests.find_one({"_id": contest["_id"]})
    assert stored["participants"] == [PARTICIPANT]
    assert stored["participants_count"] == 1


async def test_incomplete_session_writes_nothing(client, db, gateway, users):
    contest = await make_contest(db)
    session_id = (await start_checkout(client, contest)).json()["data"]["session_id"]

    response = await client.post("/payment-success", json={"session_id": session_id})

    assert response.status_code == 200
    assert response.json()["data"]["order_id"] is None
    assert await db.orders.count_documents({}) == 0
    stored = await db.contests.find_one({"_id": contest["_id"]})
    assert stored["participants_count"] == 0


async def test_unknown_session_fails_processing(client, users):
    response = await client.post("/payment-success", json={"session_id": "cs_missing"})

    assert response.status_code == 500
    assert response.json()["message"] == "Payment processing failed."


async def test_session_for_deleted_contest_writes_nothing(db, gateway, users):
    contest = await make_contest(db)
    service = PaymentService(db, gateway)
    session = await service.create_checkout_session(str(contest["_id"]), {"email": PARTICIPANT})
    gateway.complete(session["session_id"])
    await db.contests.delete_one({"_id": contest["_id"]})

    result = await service.settle_payment(session["session_id"])

    assert result["order_id"] is None
    assert await db.orders.count_documents({}) == 0


async def test_concurrent_insert_returns_existing_order(db, gateway, users):
    contest = await make_contest(db)
    service = PaymentService(db, gateway)
    session = await service.create_checkout_session(str(contest["_id"]), {"email": PARTICIPANT})
    gateway.complete(session["session_id"])
    session_result = await gateway.retrieve_checkout_session(session["session_id"])

    first = await service._insert_order(session_result, contest, PARTICIPANT)
    second = await service._insert_order(session_result, contest, PARTICIPANT)

    assert second["_id"] == first["_id"]
    assert await db.orders.count_documents({}) == 1


async def test_unrecorded_participation_is_repaired_once(db, gateway, users):
    contest = await make_contest(db)
    service = PaymentService(db, gateway)
    session = await service.create_checkout_session(str(contest["_id"]), {"email": PARTICIPANT})
    gateway.complete(session["session_id"])
    session_result = await gateway.retrieve_checkout_session(session["session_id"])
    # Order written but the process stopped before the contest update
    await service._insert_order(session_result, contest, PARTICIPANT)

    await service.settle_payment(session["session_id"])
    await service.settle_payment(session["session_id"])

    stored = await db.contests.find_one({"_id": contest["_id"]})
    assert stored["participants"] == [PARTICIPANT]
    assert stored["participants_count"] == 1
    order = await db.orders.find_one({})
    assert order["participation_recorded"] is True


async def test_gateway_outage_surfaces_as_processing_failure(db, gateway, users, monkeypatch):
    async def broken(session_id):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(gateway, "retrieve_checkout_session", broken)

    with pytest.raises(PaymentProcessingFailed):
        await PaymentService(db, gateway).settle_payment("cs_test_1")


async def test_checkout_requires_confirmed_contest(client, db, users):
    contest = await make_contest(db, status="Pending")

    response = await start_checkout(client, contest)

    assert response.status_code == 400


async def test_checkout_rejects_existing_participant(client, db, users):
    contest = await make_contest(db, participants=[PARTICIPANT], participants_count=1)

    response = await start_checkout(client, contest)

    assert response.status_code == 409


async def test_checkout_unknown_contest(client, users):
    response = await client.post(
        "/create-checkout-session",
        headers=auth(PARTICIPANT),
        json={"contest_id": str(ObjectId())}
    )

    assert response.status_code == 404


async def test_checkout_requires_identity(client, db, users):
    contest = await make_contest(db)

    response = await client.post("/create-checkout-session", json={"contest_id": str(contest["_id"])})

    assert response.status_code == 401


async def test_orders_visible_to_participant_and_creator(client, db, gateway, users):
    contest = await make_contest(db)
    session_id = (await start_checkout(client, contest)).json()["data"]["session_id"]
    gateway.complete(session_id)
    await client.post("/payment-success", json={"session_id": session_id})

    mine = await client.get("/my-contests", headers=auth(PARTICIPANT))
    managed = await client.get("/manage-contests", headers=auth(CREATOR))

    assert [o["contest_id"] for o in mine.json()["data"]["orders"]] == [str(contest["_id"])]
    assert len(managed.json()["data"]["orders"]) == 1


@pytest.fixture
def unconfigured_gateway(client, monkeypatch):
    """Use the real gateway dependency with no Stripe key in the environment"""
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    PaymentGatewayFactory.clear_cache()
    app.dependency_overrides.pop(get_payment_gateway, None)
    yield
    PaymentGatewayFactory.clear_cache()


async def test_order_listings_work_without_gateway(client, db, users, unconfigured_gateway):
    contest = await make_contest(db)
    await db.orders.insert_one({
        "contest_id": str(contest["_id"]),
        "transaction_id": "pi_existing",
        "participant": PARTICIPANT,
        "contest_creator": contest["contest_creator"],
        "contest_fee": 20
    })

    mine = await client.get("/my-contests", headers=auth(PARTICIPANT))
    managed = await client.get("/manage-contests", headers=auth(CREATOR))

    assert mine.status_code == 200
    assert len(mine.json()["data"]["orders"]) == 1
    assert managed.status_code == 200


async def test_checkout_without_gateway_is_upstream_failure(client, db, users, unconfigured_gateway):
    contest = await make_contest(db)

    response = await start_checkout(client, contest)

    assert response.status_code == 502


async def test_settlement_without_gateway_fails_processing(client, users, unconfigured_gateway):
    response = await client.post("/payment-success", json={"session_id": "cs_test_1"})

    assert response.status_code == 500
    assert response.json()["message"] == "Payment processing failed."
