from datetime import datetime
from typing import Dict, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from app.main import app
from app.database import Database, get_database
from app.models.contest.contest import ContestStatus
from app.routes.auth.dependencies import get_identity_verifier, get_payment_gateway
from app.services.payment.gateways.base import BasePaymentGateway, CheckoutSessionResult, LineItem

CREATOR = "creator@x.com"
OTHER_CREATOR = "other.creator@x.com"
ADMIN = "admin@x.com"
PARTICIPANT = "p@x.com"


class FakeIdentityVerifier:
    """Accepts tokens of the form 'token-<email>'"""

    async def verify_id_token(self, token: str) -> Optional[Dict]:
        if not token.startswith("token-"):
            return None
        return {"email": token[len("token-"):].lower()}


class FakeGateway(BasePaymentGateway):
    """In-memory hosted checkout; tests flip sessions to complete"""

    gateway_id = "fake"
    gateway_name = "Fake Gateway"

    def __init__(self):
        super().__init__({"currency": "usd"})
        self.sessions: Dict[str, CheckoutSessionResult] = {}
        self.created = []

    def _validate_config(self):
        pass

    async def create_checkout_session(self, line_item: LineItem, customer_email, success_url, cancel_url, metadata=None):
        session_id = f"cs_test_{len(self.sessions) + 1}"
        self.created.append({
            "line_item": line_item,
            "customer_email": customer_email,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": dict(metadata or {})
        })
        session = CheckoutSessionResult(
            success=True,
            session_id=session_id,
            url=f"https://checkout.test/{session_id}",
            status="open",
            payment_status="unpaid",
            amount_total=line_item.unit_amount * line_item.quantity,
            customer_email=customer_email,
            metadata=dict(metadata or {})
        )
        self.sessions[session_id] = session
        return session

    def complete(self, session_id: str, payment_intent: str = None):
        session = self.sessions[session_id]
        session.status = "complete"
        session.payment_status = "paid"
        session.payment_intent = payment_intent or f"pi_{session_id}"

    async def retrieve_checkout_session(self, session_id: str):
        if session_id not in self.sessions:
            return CheckoutSessionResult(success=False, session_id=session_id, error_message="No such checkout.session")
        return self.sessions[session_id]


def auth(email: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer token-{email}"}


@pytest_asyncio.fixture
async def db():
    database = AsyncMongoMockClient()["contests_test"]
    await Database.create_indexes(database)
    return database


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest_asyncio.fixture
async def client(db, gateway):
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_identity_verifier] = lambda: FakeIdentityVerifier()
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()


async def make_user(db, email: str, role: str = "participant", name: str = None) -> Dict:
    user = {
        "email": email,
        "name": name or email.split("@")[0],
        "photo": None,
        "bio": None,
        "role": role,
        "created_at": datetime.utcnow(),
        "last_login": datetime.utcnow()
    }
    result = await db.users.insert_one(user)
    user["_id"] = result.inserted_id
    return user


async def make_contest(db, creator: str = CREATOR, status: str = ContestStatus.CONFIRMED.value, **fields) -> Dict:
    contest = {
        "name": "Logo Design Sprint",
        "description": "Design a logo",
        "image": "https://img.test/logo.png",
        "category": "Design",
        "prize_money": 500,
        "contest_fee": 20,
        "contest_creator": {"name": "Creator", "email": creator, "photo": None},
        "participants": [],
        "participants_count": 0,
        "deadline": None,
        "task_instruction": "Upload a PNG",
        "status": status,
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow()
    }
    contest.update(fields)
    result = await db.contests.insert_one(contest)
    contest["_id"] = result.inserted_id
    return contest


@pytest_asyncio.fixture
async def users(db):
    """One user per role"""
    return {
        "creator": await make_user(db, CREATOR, "contestCreator"),
        "other_creator": await make_user(db, OTHER_CREATOR, "contestCreator"),
        "admin": await make_user(db, ADMIN, "admin"),
        "participant": await make_user(db, PARTICIPANT, "participant"),
    }
