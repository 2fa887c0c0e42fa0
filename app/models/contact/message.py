from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ContactMessageCreate(BaseModel):
    """
    Public contact form. Fields are optional here so that blank or missing
    values are reported by the service as a plain 400, like other input errors.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None


class ContactMessageInDB(BaseModel):
    name: str
    email: str
    message: str
    is_read: bool = False
    received_at: datetime = Field(default_factory=datetime.utcnow)
