import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_database
from app.core.exceptions import Unauthorized, Forbidden
from app.models.auth.user import UserRole
from app.services.auth.firebase_auth import firebase_auth_service, FirebaseAuthService
from app.services.auth.user_service import UserService
from app.services.payment.gateways.base import BasePaymentGateway
from app.services.payment.gateways.factory import PaymentGatewayFactory

logger = logging.getLogger(__name__)

# Bearer scheme (Firebase ID token)
bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_verifier() -> FirebaseAuthService:
    """Identity verifier dependency"""
    return firebase_auth_service


def get_payment_gateway() -> Optional[BasePaymentGateway]:
    """
    Payment gateway dependency.
    None when the gateway is not configured; PaymentService reports that per operation.
    """
    try:
        return PaymentGatewayFactory.get_default_gateway()
    except ValueError as e:
        logger.error(f"[ERROR] Payment gateway unavailable: {e}")
        return None


async def get_token_email(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: FirebaseAuthService = Depends(get_identity_verifier)
) -> str:
    """Verify the bearer token and return the caller's verified email"""
    if credentials is None or not credentials.credentials:
        raise Unauthorized()

    claims = await verifier.verify_id_token(credentials.credentials)
    if not claims or not claims.get("email"):
        raise Unauthorized()

    return claims["email"]


async def get_current_user(
    email: str = Depends(get_token_email),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> dict:
    """
    Get current authenticated user.
    Callers who have not hit POST /user yet get a minimal record with no role.
    """
    user = await UserService(db).get_user_by_email(email)
    if user is None:
        return {"email": email, "role": None}
    return user


def require_role(role: UserRole):
    """Build a gate that only lets callers with `role` through"""

    async def role_gate(current_user: dict = Depends(get_current_user)) -> dict:
        actual_role = current_user.get("role")
        if actual_role != role.value:
            raise Forbidden(role=actual_role)
        return current_user

    return role_gate


require_admin = require_role(UserRole.ADMIN)
require_creator = require_role(UserRole.CONTEST_CREATOR)
