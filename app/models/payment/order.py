"""
Order Models
An order is the durable record of one settled contest entry payment
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum


class OrderStatus(str, Enum):
    """Order status"""
    PAID = "Paid"


class CheckoutSessionRequest(BaseModel):
    """Request to start a Stripe checkout for a contest entry"""
    contest_id: str


class PaymentSuccessRequest(BaseModel):
    """Client callback after Stripe redirects back with the session id"""
    session_id: str = Field(..., min_length=1)


class OrderInDB(BaseModel):
    """Order in database"""
    contest_id: str          # Canonical string form of the contest ObjectId
    transaction_id: str      # Stripe payment intent id, unique
    session_id: str
    participant: str
    status: OrderStatus = OrderStatus.PAID

    # Contest snapshot at payment time
    name: str
    category: Optional[str] = None
    contest_fee: float
    image: Optional[str] = None
    contest_creator: Dict[str, Any] = Field(default_factory=dict)

    # Set once the contest participant set/counter reflect this order
    participation_recorded: bool = False

    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        use_enum_values = True
