"""
Payment Service
Checkout session creation and settlement of paid contest entries
"""
import os
import logging
from datetime import datetime
from typing import Optional, Dict, Any, List
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError
from dotenv import load_dotenv

from app.core.exceptions import (
    Conflict,
    InvalidState,
    NotFound,
    PaymentProcessingFailed,
    UpstreamFailure
)
from app.models.contest.contest import ContestStatus
from app.models.payment.order import OrderInDB, OrderStatus
from app.services.payment.gateways.base import BasePaymentGateway, LineItem
from app.utils.serializers import to_object_id

load_dotenv()

logger = logging.getLogger(__name__)

CLIENT_DOMAIN = os.getenv("CLIENT_DOMAIN", "http://localhost:5173")


class PaymentService:
    """
    Service for payment operations.
    Handles checkout creation and idempotent settlement into orders.
    """

    def __init__(self, db: AsyncIOMotorDatabase, gateway: Optional[BasePaymentGateway] = None):
        self.db = db
        self.gateway = gateway
        self.orders = db.orders
        self.contests = db.contests

    async def create_checkout_session(self, contest_id: str, participant: Dict) -> Dict[str, Any]:
        """
        Build a single line item priced at the stored contest fee and
        return the gateway-hosted checkout URL.
        """
        if self.gateway is None:
            raise UpstreamFailure("Payment gateway is not configured")

        oid = to_object_id(contest_id)
        contest = await self.contests.find_one({"_id": oid}) if oid else None
        if not contest:
            raise NotFound("Contest not found")

        if contest["status"] != ContestStatus.CONFIRMED.value:
            raise InvalidState("Only Confirmed contests accept entries")

        deadline = contest.get("deadline")
        if deadline and deadline < datetime.utcnow():
            raise InvalidState("Contest deadline has passed")

        email = participant["email"].lower()
        if email in contest.get("participants", []):
            raise Conflict("You are already registered for this contest")

        contest_id = str(contest["_id"])
        line_item = LineItem(
            name=contest["name"],
            description=contest.get("description"),
            image=contest.get("image"),
            unit_amount=self.gateway.to_minor_units(contest.get("contest_fee", 0)),
            quantity=1
        )

        result = await self.gateway.create_checkout_session(
            line_item=line_item,
            customer_email=email,
            success_url=f"{CLIENT_DOMAIN}/payment-success?session_id={{CHECKOUT_SESSION_ID}}&contestId={contest_id}",
            cancel_url=f"{CLIENT_DOMAIN}/contest/{contest_id}",
            metadata={"contestId": contest_id, "participant": email}
        )

        if not result.success:
            logger.error(f"[ERROR] create_checkout_session failed: {result.error_message}")
            raise UpstreamFailure("Failed to create checkout session")

        return {"url": result.url, "session_id": result.session_id}

    async def settle_payment(self, session_id: str) -> Dict[str, Optional[str]]:
        """
        Turn a completed checkout session into exactly one order and exactly
        one participation increment.

        Safe to call repeatedly with the same session id: later calls return
        the existing order id without writing. The unique index on
        orders.transaction_id decides concurrent first settlements.
        """
        if self.gateway is None:
            logger.error(f"[ERROR] Cannot settle session {session_id}: payment gateway is not configured")
            raise PaymentProcessingFailed()

        try:
            session = await self.gateway.retrieve_checkout_session(session_id)
            if not session.success:
                logger.error(f"[ERROR] Could not retrieve session {session_id}: {session.error_message}")
                raise PaymentProcessingFailed()

            transaction_id = session.payment_intent
            contest_id = session.metadata.get("contestId")
            participant_email = (session.metadata.get("participant") or "").lower()

            oid = to_object_id(contest_id)
            contest = await self.contests.find_one({"_id": oid}) if oid else None
            order = await self.orders.find_one({"transaction_id": transaction_id}) if transaction_id else None

            if session.is_complete and contest and transaction_id and not order:
                order = await self._insert_order(session, contest, participant_email)

            if order and session.is_complete and contest and not order.get("participation_recorded"):
                await self._record_participation(order, participant_email)

            return {
                "transaction_id": transaction_id,
                "order_id": str(order["_id"]) if order else None
            }

        except PaymentProcessingFailed:
            raise
        except Exception as e:
            logger.exception(f"[ERROR] Settlement of session {session_id} failed: {e}")
            raise PaymentProcessingFailed()

    async def _insert_order(self, session, contest: Dict, participant_email: str) -> Dict:
        """Insert the order snapshot; a duplicate transaction id yields the existing row"""
        amount_total = session.amount_total
        order = OrderInDB(
            contest_id=str(contest["_id"]),
            transaction_id=session.payment_intent,
            session_id=session.session_id,
            participant=participant_email,
            status=OrderStatus.PAID,
            contest_creator=contest.get("contest_creator", {}),
            name=contest.get("name"),
            category=contest.get("category"),
            contest_fee=amount_total / 100 if amount_total is not None else contest.get("contest_fee", 0),
            image=contest.get("image"),
            participation_recorded=False
        ).model_dump()

        try:
            result = await self.orders.insert_one(order)
        except DuplicateKeyError:
            logger.info(f"Order for {session.payment_intent} already settled concurrently")
            return await self.orders.find_one({"transaction_id": session.payment_intent})

        order["_id"] = result.inserted_id
        logger.info(f"Order {result.inserted_id} created for {participant_email} on contest {order['contest_id']}")
        return order

    async def _record_participation(self, order: Dict, participant_email: str):
        """
        Add the participant to the contest exactly once per order.
        The order's participation_recorded flag is claimed atomically first and
        released again if the contest update fails.
        """
        claimed = await self.orders.find_one_and_update(
            {"_id": order["_id"], "participation_recorded": False},
            {"$set": {"participation_recorded": True}}
        )
        if claimed is None:
            return

        try:
            await self.contests.update_one(
                {"_id": to_object_id(order["contest_id"])},
                {
                    "$addToSet": {"participants": participant_email or order["participant"]},
                    "$inc": {"participants_count": 1}
                }
            )
        except PyMongoError:
            await self.orders.update_one(
                {"_id": order["_id"]},
                {"$set": {"participation_recorded": False}}
            )
            raise

        order["participation_recorded"] = True

    async def get_participant_orders(self, email: str) -> List[Dict]:
        """Orders placed by a participant ("my contests")"""
        cursor = self.orders.find({"participant": email.lower()}).sort("created_at", -1)
        return await cursor.to_list(length=None)

    async def get_creator_orders(self, email: str) -> List[Dict]:
        """Orders placed on a creator's contests"""
        cursor = self.orders.find(
            {"contest_creator.email": email.lower()}
        ).sort("created_at", -1)
        return await cursor.to_list(length=None)
