from pydantic import BaseModel, Field, EmailStr
from typing import Optional, List
from datetime import datetime
from enum import Enum


class ContestStatus(str, Enum):
    """
    Contest status types - State Machine

    State Transitions:
    - PENDING -> CONFIRMED (admin approves)
    - PENDING -> REJECTED (admin rejects)
    - CONFIRMED -> COMPLETED (creator declares a winner)

    REJECTED and COMPLETED are terminal.
    """
    PENDING = "Pending"  # Awaiting admin review, creator can still edit/delete
    CONFIRMED = "Confirmed"  # Public, accepting entries and submissions
    REJECTED = "Rejected"
    COMPLETED = "Completed"  # Winner declared


# Statuses an admin may move a Pending contest into
REVIEW_STATUSES = (ContestStatus.CONFIRMED, ContestStatus.REJECTED)

# Statuses visible on the public listing
PUBLIC_STATUSES = (ContestStatus.CONFIRMED, ContestStatus.COMPLETED)


class ContestCreator(BaseModel):
    name: Optional[str] = None
    email: EmailStr
    photo: Optional[str] = None


class ContestCreate(BaseModel):
    """
    Schema for creating a contest.

    Any `status` sent by the client is ignored; contests always start PENDING
    and the creator is taken from the verified caller.
    """
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    image: Optional[str] = None
    category: str = Field(..., min_length=1)
    prize_money: float = Field(0, ge=0)
    contest_fee: float = Field(0, ge=0)
    deadline: Optional[datetime] = None
    task_instruction: Optional[str] = None


class ContestUpdate(BaseModel):
    """Schema for updating a contest (only allowed while PENDING)"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    prize_money: Optional[float] = Field(None, ge=0)
    contest_fee: Optional[float] = Field(None, ge=0)
    deadline: Optional[datetime] = None
    task_instruction: Optional[str] = None


class ContestStatusUpdate(BaseModel):
    """Admin review decision. Validated against REVIEW_STATUSES in the service."""
    status: str


class WinnerDeclaration(BaseModel):
    """Creator picks the winning submission; the winner identity is the submitter's"""
    submission_id: str


class ContestInDB(BaseModel):
    """Schema for contest stored in database"""
    name: str
    description: str
    image: Optional[str] = None
    category: str
    prize_money: float = 0.0
    contest_fee: float = 0.0
    contest_creator: ContestCreator
    participants: List[str] = []
    participants_count: int = 0
    deadline: Optional[datetime] = None
    task_instruction: Optional[str] = None
    status: ContestStatus = ContestStatus.PENDING

    # Review
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        use_enum_values = True
