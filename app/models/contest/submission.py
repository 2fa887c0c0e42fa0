from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class SubmissionStatus(str, Enum):
    """Submission status"""
    PENDING = "Pending"  # Waiting for the creator to pick a winner
    WINNER = "Winner"


class SubmissionCreate(BaseModel):
    """Schema for submitting a task; participant identity comes from the token"""
    contest_id: str
    task: str = Field(..., min_length=1, description="Task answer, link or proof")
    name: Optional[str] = None
    photo: Optional[str] = None


class SubmissionInDB(BaseModel):
    """Schema for submission stored in database"""
    contest_id: str  # Canonical string form of the contest ObjectId
    email: str
    name: Optional[str] = None
    photo: Optional[str] = None
    task: str
    status: SubmissionStatus = SubmissionStatus.PENDING
    submitted_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        use_enum_values = True
