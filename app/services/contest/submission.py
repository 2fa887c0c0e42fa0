import logging
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional, List, Dict
from datetime import datetime
from pymongo.errors import DuplicateKeyError
from app.core.exceptions import Conflict, Forbidden, InvalidState, NotFound
from app.models.contest.contest import ContestStatus
from app.models.contest.submission import SubmissionCreate, SubmissionInDB, SubmissionStatus
from app.utils.serializers import to_object_id

logger = logging.getLogger(__name__)


class SubmissionService:
    """Service for task submissions"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.submissions = db.submissions
        self.contests = db.contests

    async def create_submission(self, submission_data: SubmissionCreate, user: Dict) -> Dict:
        """
        Submit a task for a contest.

        Requirements:
        - Contest exists and is CONFIRMED
        - Deadline (if any) has not passed
        - Caller paid to enter (is in the participant set)
        - One submission per participant per contest
        """
        oid = to_object_id(submission_data.contest_id)
        contest = await self.contests.find_one({"_id": oid}) if oid else None
        if not contest:
            raise NotFound("Contest not found")

        if contest["status"] != ContestStatus.CONFIRMED.value:
            raise InvalidState("Submissions are only accepted for Confirmed contests")

        deadline = contest.get("deadline")
        if deadline and deadline < datetime.utcnow():
            raise InvalidState("Contest deadline has passed")

        email = user["email"].lower()
        if email not in contest.get("participants", []):
            raise Forbidden("Register for the contest before submitting")

        submission = SubmissionInDB(
            contest_id=str(contest["_id"]),
            email=email,
            name=submission_data.name or user.get("name"),
            photo=submission_data.photo or user.get("photo"),
            task=submission_data.task,
            status=SubmissionStatus.PENDING
        ).model_dump()

        try:
            result = await self.submissions.insert_one(submission)
        except DuplicateKeyError:
            raise Conflict("You have already submitted for this contest")

        submission["_id"] = result.inserted_id
        return submission

    async def get_submission_by_id(self, submission_id: str) -> Optional[Dict]:
        oid = to_object_id(submission_id)
        if oid is None:
            return None
        return await self.submissions.find_one({"_id": oid})

    async def get_contest_submissions(self, contest_id: str) -> List[Dict]:
        cursor = self.submissions.find({"contest_id": contest_id}).sort("submitted_at", 1)
        return await cursor.to_list(length=None)

    async def has_submitted(self, contest_id: str, email: str) -> bool:
        count = await self.submissions.count_documents({
            "contest_id": contest_id,
            "email": email.lower()
        })
        return count > 0

    async def get_creator_submissions(self, creator_email: str) -> List[Dict]:
        """All submissions across the contests created by `creator_email`"""
        cursor = self.contests.find(
            {"contest_creator.email": creator_email.lower()},
            {"_id": 1}
        )
        contest_ids = [str(c["_id"]) for c in await cursor.to_list(length=None)]
        if not contest_ids:
            return []

        cursor = self.submissions.find(
            {"contest_id": {"$in": contest_ids}}
        ).sort("submitted_at", -1)
        return await cursor.to_list(length=None)

    async def mark_winner(self, submission_id: Optional[str]) -> bool:
        """Idempotently mark a submission as the winner"""
        oid = to_object_id(submission_id)
        if oid is None:
            return False
        result = await self.submissions.update_one(
            {"_id": oid},
            {"$set": {"status": SubmissionStatus.WINNER.value}}
        )
        return result.matched_count > 0
