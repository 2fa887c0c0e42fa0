from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from app.database import get_database
from app.core.exceptions import Forbidden, NotFound
from app.models.auth.user import UserRole
from app.models.contest.submission import SubmissionCreate
from app.services.contest.contest import ContestService
from app.services.contest.submission import SubmissionService
from app.routes.auth.dependencies import get_current_user, require_creator
from app.utils.response import success_response
from app.utils.serializers import serialize_document, serialize_documents

router = APIRouter(tags=["Submissions"])


@router.post("/submit-task")
async def submit_task(
    body: SubmissionCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Submit a task for a contest the caller has paid to enter"""
    submission = await SubmissionService(db).create_submission(body, current_user)
    return success_response(
        message="Task submitted successfully",
        data={"submission": serialize_document(submission)},
        status_code=201
    )


@router.get("/contest-submissions/{contest_id}")
async def get_contest_submissions(
    contest_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """All submissions for one contest (its creator or an admin)"""
    contest = await ContestService(db).get_contest_by_id(contest_id)
    if not contest:
        raise NotFound("Contest not found")

    is_owner = contest["contest_creator"]["email"] == current_user["email"].lower()
    if not is_owner and current_user.get("role") != UserRole.ADMIN.value:
        raise Forbidden("Only the contest creator can view submissions", role=current_user.get("role"))

    submissions = await SubmissionService(db).get_contest_submissions(str(contest["_id"]))
    return success_response(
        message="Submissions retrieved successfully",
        data={"submissions": serialize_documents(submissions)}
    )


@router.get("/contest-submission-status/{contest_id}/{email}")
async def get_submission_status(
    contest_id: str,
    email: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Has this participant already submitted for this contest"""
    submitted = await SubmissionService(db).has_submitted(contest_id, email)
    return success_response(
        message="Submission status retrieved successfully",
        data={"submitted": submitted}
    )


@router.get("/creator-submissions/{email}")
async def get_creator_submissions(
    email: str,
    current_user: dict = Depends(require_creator),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Submissions across all contests of the calling creator"""
    if email.lower() != current_user["email"].lower():
        raise Forbidden("You can only view submissions for your own contests", role=current_user.get("role"))

    submissions = await SubmissionService(db).get_creator_submissions(email)
    return success_response(
        message="Submissions retrieved successfully",
        data={"submissions": serialize_documents(submissions)}
    )
