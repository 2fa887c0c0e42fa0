from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from app.database import get_database
from app.models.contact.message import ContactMessageCreate
from app.services.contact.contact import ContactService
from app.routes.auth.dependencies import require_admin
from app.utils.response import success_response
from app.utils.serializers import serialize_document, serialize_documents

router = APIRouter(tags=["Contact"])


@router.post("/contact")
async def create_contact_message(
    body: ContactMessageCreate,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Public contact form. name, email and message are required."""
    message = await ContactService(db).create_message(body)
    return success_response(
        message="Message received",
        data={"message": serialize_document(message)},
        status_code=201
    )


@router.get("/contact-messages")
async def get_contact_messages(
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    messages = await ContactService(db).get_messages()
    return success_response(
        message="Messages retrieved successfully",
        data={"messages": serialize_documents(messages)}
    )


@router.patch("/contact-messages/{message_id}/read")
async def mark_message_read(
    message_id: str,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    message = await ContactService(db).mark_read(message_id)
    return success_response(
        message="Message marked as read",
        data={"message": serialize_document(message)}
    )
