from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """User roles"""
    PARTICIPANT = "participant"
    CONTEST_CREATOR = "contestCreator"
    ADMIN = "admin"


class UserLogin(BaseModel):
    """Profile fields sent by the client on login; email comes from the token"""
    name: Optional[str] = None
    photo: Optional[str] = None


class UserUpdate(BaseModel):
    """Schema for profile updates (email and role cannot be changed here)"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    photo: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)


class RoleUpdate(BaseModel):
    """Admin role change. Validated against UserRole in the service."""
    email: EmailStr
    role: str


class UserInDB(BaseModel):
    """Schema for user in database"""
    email: EmailStr
    name: Optional[str] = None
    photo: Optional[str] = None
    bio: Optional[str] = None
    role: UserRole = UserRole.PARTICIPANT
    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        use_enum_values = True
