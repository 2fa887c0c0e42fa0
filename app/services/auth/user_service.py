import logging
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional, Dict, List, Tuple
from datetime import datetime
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from app.core.exceptions import Conflict, InvalidInput, InvalidState, NotFound
from app.models.auth.user import UserRole, UserLogin, UserUpdate, UserInDB
from app.utils.response import pagination_meta

logger = logging.getLogger(__name__)


class UserService:
    """Role store and profile operations over the users collection"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.users_collection = db.users
        self.creator_requests = db.creator_requests

    async def get_user_by_email(self, email: str) -> Optional[Dict]:
        """Get user by email"""
        return await self.users_collection.find_one({"email": email.lower()})

    async def get_role(self, email: str) -> Optional[str]:
        user = await self.get_user_by_email(email)
        return user.get("role") if user else None

    async def upsert_on_login(self, email: str, login: UserLogin) -> Dict:
        """
        Create the user on first login, otherwise refresh last_login.
        Role is only ever set on insert.
        """
        now = datetime.utcnow()
        new_user = UserInDB(
            email=email.lower(),
            name=login.name,
            photo=login.photo,
            role=UserRole.PARTICIPANT,
            created_at=now,
            last_login=now
        ).model_dump()

        update_fields = {"last_login": now}
        if login.name:
            update_fields["name"] = login.name
        if login.photo:
            update_fields["photo"] = login.photo

        # Fields already in the filter or in $set must stay out of $setOnInsert
        insert_only = {
            k: v for k, v in new_user.items()
            if k != "email" and k not in update_fields
        }

        return await self.users_collection.find_one_and_update(
            {"email": email.lower()},
            {"$set": update_fields, "$setOnInsert": insert_only},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )

    async def update_profile(self, email: str, profile: UserUpdate) -> Dict:
        update_fields = profile.model_dump(exclude_none=True)
        if not update_fields:
            raise InvalidInput("No profile fields to update")

        user = await self.users_collection.find_one_and_update(
            {"email": email.lower()},
            {"$set": update_fields},
            return_document=ReturnDocument.AFTER
        )
        if not user:
            raise NotFound("User not found")
        return user

    async def request_creator_role(self, email: str) -> Dict:
        """File a request to become a contest creator"""
        user = await self.get_user_by_email(email)
        if not user:
            raise NotFound("User not found")

        if user.get("role") != UserRole.PARTICIPANT.value:
            raise InvalidState(f"User is already a {user.get('role')}")

        request_doc = {
            "email": user["email"],
            "name": user.get("name"),
            "photo": user.get("photo"),
            "requested_at": datetime.utcnow()
        }
        try:
            result = await self.creator_requests.insert_one(request_doc)
        except DuplicateKeyError:
            raise Conflict("Creator request already submitted")

        request_doc["_id"] = result.inserted_id
        return request_doc

    async def get_creator_requests(self) -> List[Dict]:
        cursor = self.creator_requests.find({}).sort("requested_at", -1)
        return await cursor.to_list(length=None)

    async def get_users(self, page: int = 1, limit: int = 20) -> Tuple[List[Dict], Dict]:
        """Get users with pagination, newest first"""
        skip = (page - 1) * limit
        total = await self.users_collection.count_documents({})

        cursor = self.users_collection.find({}).sort("created_at", -1).skip(skip).limit(limit)
        users = await cursor.to_list(length=limit)

        return users, pagination_meta(page, limit, total)

    async def update_role(self, email: str, role: str, admin_email: str) -> Dict:
        """Admin changes a user's role; any pending creator request is cleared"""
        try:
            new_role = UserRole(role)
        except ValueError:
            allowed = ", ".join(r.value for r in UserRole)
            raise InvalidInput(f"Invalid role '{role}'. Allowed: {allowed}")

        user = await self.users_collection.find_one_and_update(
            {"email": email.lower()},
            {"$set": {"role": new_role.value, "role_updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if not user:
            raise NotFound("User not found")

        await self.creator_requests.delete_one({"email": email.lower()})
        logger.info(f"Role of {email} set to {new_role.value} by {admin_email}")
        return user
