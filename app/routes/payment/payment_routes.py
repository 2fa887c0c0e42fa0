"""
Payment Routes
Contest entry checkout and settlement
"""
from typing import Optional
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_database
from app.models.payment.order import CheckoutSessionRequest, PaymentSuccessRequest
from app.services.payment.gateways.base import BasePaymentGateway
from app.services.payment.payment_service import PaymentService
from app.routes.auth.dependencies import get_current_user, get_payment_gateway, require_creator
from app.utils.response import success_response
from app.utils.serializers import serialize_documents

router = APIRouter(tags=["Payments"])


def get_payment_service(
    db: AsyncIOMotorDatabase = Depends(get_database),
    gateway: Optional[BasePaymentGateway] = Depends(get_payment_gateway)
) -> PaymentService:
    return PaymentService(db, gateway)


def get_order_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> PaymentService:
    """Order listings only read the store and need no gateway"""
    return PaymentService(db)


@router.post("/create-checkout-session")
async def create_checkout_session(
    body: CheckoutSessionRequest,
    current_user: dict = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """
    Start a hosted checkout for a contest entry.

    Security:
    - Price is the stored contest fee, never a client value
    - Participant email comes from the verified token
    """
    session = await payment_service.create_checkout_session(body.contest_id, current_user)
    return success_response(
        message="Checkout session created",
        data=session
    )


@router.post("/payment-success")
async def payment_success(
    body: PaymentSuccessRequest,
    payment_service: PaymentService = Depends(get_payment_service)
):
    """
    Settle a checkout session into an order.
    Idempotent: retrying with the same session id returns the same order.
    """
    result = await payment_service.settle_payment(body.session_id)
    return success_response(
        message="Payment processed" if result["order_id"] else "Payment not completed",
        data=result
    )


@router.get("/my-contests")
async def get_my_contests(
    current_user: dict = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_order_service)
):
    """Contests the caller has paid to enter"""
    orders = await payment_service.get_participant_orders(current_user["email"])
    return success_response(
        message="Orders retrieved successfully",
        data={"orders": serialize_documents(orders)}
    )


@router.get("/manage-contests")
async def get_manage_contests(
    current_user: dict = Depends(require_creator),
    payment_service: PaymentService = Depends(get_order_service)
):
    """Entries placed on the caller's contests"""
    orders = await payment_service.get_creator_orders(current_user["email"])
    return success_response(
        message="Orders retrieved successfully",
        data={"orders": serialize_documents(orders)}
    )
