import re
import logging
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional, List, Dict, Tuple
from datetime import datetime
from pymongo import ReturnDocument
from app.core.exceptions import Conflict, Forbidden, InvalidInput, InvalidState, NotFound
from app.models.contest.contest import (
    ContestCreate,
    ContestCreator,
    ContestInDB,
    ContestStatus,
    ContestUpdate,
    WinnerDeclaration,
    PUBLIC_STATUSES,
    REVIEW_STATUSES
)
from app.services.contest.submission import SubmissionService
from app.utils.serializers import to_object_id, to_naive_utc

logger = logging.getLogger(__name__)

POPULAR_CONTESTS_LIMIT = 6


class ContestService:
    """Service for contest CRUD and lifecycle transitions"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.contests = db.contests
        self.submission_service = SubmissionService(db)

    async def _require_contest(self, contest_id: str) -> Dict:
        """Fetch a contest or raise NotFound (malformed ids count as not found)"""
        contest = await self.get_contest_by_id(contest_id)
        if not contest:
            raise NotFound("Contest not found")
        return contest

    @staticmethod
    def _require_creator(contest: Dict, email: str, action: str):
        creator_email = (contest.get("contest_creator") or {}).get("email", "")
        if creator_email.lower() != email.lower():
            raise Forbidden(f"Only the contest creator can {action}")

    async def get_contest_by_id(self, contest_id: str) -> Optional[Dict]:
        oid = to_object_id(contest_id)
        if oid is None:
            return None
        return await self.contests.find_one({"_id": oid})

    async def get_contests(
        self,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[Dict], int]:
        """
        Public listing: Confirmed and Completed contests, newest first.
        `category` matches case-insensitively on the whole name.
        """
        match_query = {"status": {"$in": [s.value for s in PUBLIC_STATUSES]}}
        if category:
            match_query["category"] = {
                "$regex": f"^{re.escape(category.strip())}$",
                "$options": "i"
            }

        total = await self.contests.count_documents(match_query)
        skip = (page - 1) * limit
        cursor = self.contests.find(match_query).sort("created_at", -1).skip(skip).limit(limit)
        contests = await cursor.to_list(length=limit)
        return contests, total

    async def get_popular_contests(self, limit: int = POPULAR_CONTESTS_LIMIT) -> List[Dict]:
        """Confirmed contests with the most participants"""
        cursor = self.contests.find(
            {"status": ContestStatus.CONFIRMED.value}
        ).sort("participants_count", -1).limit(limit)
        return await cursor.to_list(length=limit)

    async def get_all_contests(self, status: Optional[str] = None) -> List[Dict]:
        """Admin listing, optionally filtered by status"""
        query = {}
        if status:
            try:
                query["status"] = ContestStatus(status).value
            except ValueError:
                raise InvalidInput(f"Invalid status '{status}'")
        cursor = self.contests.find(query).sort("created_at", -1)
        return await cursor.to_list(length=None)

    async def get_creator_contests(self, email: str) -> List[Dict]:
        """All contests created by `email`, any status"""
        cursor = self.contests.find(
            {"contest_creator.email": email.lower()}
        ).sort("created_at", -1)
        return await cursor.to_list(length=None)

    async def create_contest(self, contest_data: ContestCreate, creator: Dict) -> Dict:
        """Create a new contest. Status is always PENDING; creator is the caller."""
        now = datetime.utcnow()
        contest = ContestInDB(
            name=contest_data.name,
            description=contest_data.description,
            image=contest_data.image,
            category=contest_data.category,
            prize_money=contest_data.prize_money,
            contest_fee=contest_data.contest_fee,
            contest_creator=ContestCreator(
                name=creator.get("name"),
                email=creator["email"].lower(),
                photo=creator.get("photo")
            ),
            deadline=to_naive_utc(contest_data.deadline),
            task_instruction=contest_data.task_instruction,
            status=ContestStatus.PENDING,
            created_at=now,
            updated_at=now
        ).model_dump()

        result = await self.contests.insert_one(contest)
        contest["_id"] = result.inserted_id
        logger.info(f"Contest {result.inserted_id} created by {creator['email']}")
        return contest

    async def update_contest(
        self,
        contest_id: str,
        contest_data: ContestUpdate,
        email: str
    ) -> Dict:
        """Update content fields of a PENDING contest (owner only)"""
        contest = await self._require_contest(contest_id)
        self._require_creator(contest, email, "update this contest")

        if contest["status"] != ContestStatus.PENDING.value:
            raise Forbidden("Only Pending contests can be updated")

        update_fields = contest_data.model_dump(exclude_unset=True)
        if "deadline" in update_fields:
            update_fields["deadline"] = to_naive_utc(update_fields["deadline"])
        if not update_fields:
            raise InvalidInput("No fields to update")
        update_fields["updated_at"] = datetime.utcnow()

        updated = await self.contests.find_one_and_update(
            {"_id": contest["_id"], "status": ContestStatus.PENDING.value},
            {"$set": update_fields},
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise Forbidden("Only Pending contests can be updated")
        return updated

    async def update_status(self, contest_id: str, status: str, admin_email: str) -> Dict:
        """
        Admin review: PENDING -> CONFIRMED | REJECTED.
        Records who reviewed it and when.
        """
        try:
            new_status = ContestStatus(status)
        except ValueError:
            new_status = None
        if new_status not in REVIEW_STATUSES:
            allowed = ", ".join(s.value for s in REVIEW_STATUSES)
            raise InvalidInput(f"Invalid status '{status}'. Allowed: {allowed}")

        oid = to_object_id(contest_id)
        if oid is None:
            raise NotFound("Contest not found")

        now = datetime.utcnow()
        updated = await self.contests.find_one_and_update(
            {"_id": oid, "status": ContestStatus.PENDING.value},
            {"$set": {
                "status": new_status.value,
                "approved_by": admin_email.lower(),
                "approved_at": now,
                "updated_at": now
            }},
            return_document=ReturnDocument.AFTER
        )

        if updated is None:
            contest = await self.contests.find_one({"_id": oid})
            if not contest:
                raise NotFound("Contest not found")
            raise InvalidState(f"Contest is already {contest['status']}")

        logger.info(f"Contest {contest_id} set to {new_status.value} by {admin_email}")
        return updated

    async def delete_contest(self, contest_id: str):
        """Admin delete: any status, permanent"""
        oid = to_object_id(contest_id)
        if oid is None:
            raise NotFound("Contest not found")

        result = await self.contests.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFound("Contest not found")
        logger.info(f"Contest {contest_id} deleted by admin")

    async def delete_creator_contest(self, contest_id: str, email: str):
        """Creator delete: own contest, only while PENDING"""
        contest = await self._require_contest(contest_id)
        self._require_creator(contest, email, "delete this contest")

        if contest["status"] != ContestStatus.PENDING.value:
            raise Forbidden("Only Pending contests can be deleted")

        result = await self.contests.delete_one({
            "_id": contest["_id"],
            "status": ContestStatus.PENDING.value
        })
        if result.deleted_count == 0:
            raise Forbidden("Only Pending contests can be deleted")

    async def declare_winner(
        self,
        contest_id: str,
        declaration: WinnerDeclaration,
        email: str
    ) -> Dict:
        """
        CONFIRMED -> COMPLETED with the winner recorded in the same write,
        then mark the winning submission.

        A repeat declaration re-applies the submission mark for the recorded
        winner before raising Conflict, so a failure between the two writes is
        repaired by retrying.
        """
        contest = await self._require_contest(contest_id)
        self._require_creator(contest, email, "declare a winner")

        if contest.get("winner"):
            await self.submission_service.mark_winner(contest["winner"].get("submission_id"))
            raise Conflict("Winner already declared for this contest")

        if contest["status"] != ContestStatus.CONFIRMED.value:
            raise InvalidState("Contest must be Confirmed to declare a winner")

        submission = await self.submission_service.get_submission_by_id(declaration.submission_id)
        if not submission:
            raise NotFound("Submission not found")
        if submission["contest_id"] != str(contest["_id"]):
            raise InvalidInput("Submission does not belong to this contest")

        now = datetime.utcnow()
        winner = {
            "name": submission.get("name"),
            "email": submission["email"].lower(),
            "photo": submission.get("photo"),
            "submission_id": str(submission["_id"]),
            "declared_at": now
        }

        updated = await self.contests.find_one_and_update(
            {
                "_id": contest["_id"],
                "status": ContestStatus.CONFIRMED.value,
                "winner": {"$exists": False}
            },
            {"$set": {
                "winner": winner,
                "status": ContestStatus.COMPLETED.value,
                "completed_at": now,
                "updated_at": now
            }},
            return_document=ReturnDocument.AFTER
        )

        if updated is None:
            # Lost a race with another declaration or review
            current = await self.contests.find_one({"_id": contest["_id"]})
            if current and current.get("winner"):
                raise Conflict("Winner already declared for this contest")
            raise InvalidState("Contest must be Confirmed to declare a winner")

        await self.submission_service.mark_winner(winner["submission_id"])
        logger.info(f"Winner {winner['email']} declared for contest {contest_id}")
        return updated
