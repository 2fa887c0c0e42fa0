from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Dict, List
from pymongo import ReturnDocument
from app.core.exceptions import InvalidInput, NotFound
from app.models.contact.message import ContactMessageCreate, ContactMessageInDB
from app.utils.serializers import to_object_id


class ContactService:
    """Append-only inbox for the public contact form"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.messages = db.contact_messages

    async def create_message(self, data: ContactMessageCreate) -> Dict:
        missing = [
            field for field in ("name", "email", "message")
            if not (getattr(data, field) or "").strip()
        ]
        if missing:
            raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

        message = ContactMessageInDB(
            name=data.name.strip(),
            email=data.email.strip().lower(),
            message=data.message.strip()
        ).model_dump()
        result = await self.messages.insert_one(message)
        message["_id"] = result.inserted_id
        return message

    async def get_messages(self) -> List[Dict]:
        cursor = self.messages.find({}).sort("received_at", -1)
        return await cursor.to_list(length=None)

    async def mark_read(self, message_id: str) -> Dict:
        oid = to_object_id(message_id)
        message = None
        if oid is not None:
            message = await self.messages.find_one_and_update(
                {"_id": oid},
                {"$set": {"is_read": True}},
                return_document=ReturnDocument.AFTER
            )
        if not message:
            raise NotFound("Message not found")
        return message
