from fastapi import APIRouter, Depends, Query
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from app.database import get_database
from app.core.exceptions import InvalidInput, NotFound
from app.services.contest.contest import ContestService
from app.routes.auth.dependencies import require_admin, require_creator
from app.models.contest.contest import (
    ContestCreate,
    ContestUpdate,
    ContestStatusUpdate,
    WinnerDeclaration
)
from app.utils.response import success_response, pagination_meta
from app.utils.serializers import serialize_document, serialize_documents, to_object_id

router = APIRouter(tags=["Contests"])


def public_contest_json(contest: dict) -> dict:
    """Listing view: participant emails are not exposed"""
    data = serialize_document(contest)
    data.pop("participants", None)
    return data


@router.get("/contests")
async def get_contests(
    type: Optional[str] = Query(None, description="Category filter (case-insensitive)"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Public contest listing.
    Only Confirmed and Completed contests are shown, newest first.
    """
    contests, total = await ContestService(db).get_contests(category=type, page=page, limit=limit)

    return success_response(
        message="Contests retrieved successfully",
        data={
            "contests": [public_contest_json(c) for c in contests],
            "pagination": pagination_meta(page, limit, total)
        }
    )


@router.get("/popular-contests")
async def get_popular_contests(db: AsyncIOMotorDatabase = Depends(get_database)):
    """Confirmed contests with the most participants"""
    contests = await ContestService(db).get_popular_contests()
    return success_response(
        message="Popular contests retrieved successfully",
        data={"contests": [public_contest_json(c) for c in contests]}
    )


@router.get("/contest/{contest_id}")
async def get_contest(contest_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Get single contest"""
    if to_object_id(contest_id) is None:
        raise InvalidInput("Invalid contest id")

    contest = await ContestService(db).get_contest_by_id(contest_id)
    if not contest:
        raise NotFound("Contest not found")

    return success_response(
        message="Contest retrieved successfully",
        data={"contest": public_contest_json(contest)}
    )


@router.post("/contests")
async def create_contest(
    body: ContestCreate,
    current_user: dict = Depends(require_creator),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Create a new contest.

    - Contest always starts in Pending status, whatever the client sends
    - Creator is the authenticated caller
    """
    contest = await ContestService(db).create_contest(body, current_user)
    return success_response(
        message="Contest created successfully",
        data={"contest": serialize_document(contest)},
        status_code=201
    )


@router.put("/contests-update/{contest_id}")
async def update_contest(
    contest_id: str,
    body: ContestUpdate,
    current_user: dict = Depends(require_creator),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Update a Pending contest (owner only). Status and winner are not editable."""
    contest = await ContestService(db).update_contest(contest_id, body, current_user["email"])
    return success_response(
        message="Contest updated successfully!",
        data={"contest": serialize_document(contest)}
    )


@router.patch("/contest-status/{contest_id}")
async def update_contest_status(
    contest_id: str,
    body: ContestStatusUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Admin review: Pending -> Confirmed | Rejected"""
    contest = await ContestService(db).update_status(contest_id, body.status, current_user["email"])
    return success_response(
        message=f"Contest {contest['status']}",
        data={"contest": serialize_document(contest)}
    )


@router.delete("/contests-delete/{contest_id}")
async def delete_contest(
    contest_id: str,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Admin delete (any status, permanent)"""
    await ContestService(db).delete_contest(contest_id)
    return success_response(message="Contest deleted successfully")


@router.delete("/creator-contests-delete/{contest_id}")
async def delete_creator_contest(
    contest_id: str,
    current_user: dict = Depends(require_creator),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Creator delete: own contests, only while Pending"""
    await ContestService(db).delete_creator_contest(contest_id, current_user["email"])
    return success_response(message="Contest deleted successfully")


@router.get("/all-contests")
async def get_all_contests(
    status: Optional[str] = Query(None, description="Filter by status"),
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    contests = await ContestService(db).get_all_contests(status)
    return success_response(
        message="Contests retrieved successfully",
        data={"contests": serialize_documents(contests)}
    )


@router.get("/my-inventory")
async def get_my_inventory(
    current_user: dict = Depends(require_creator),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Contests created by the caller, any status"""
    contests = await ContestService(db).get_creator_contests(current_user["email"])
    return success_response(
        message="Contests retrieved successfully",
        data={"contests": serialize_documents(contests)}
    )


@router.patch("/contests/winner/{contest_id}")
async def declare_winner(
    contest_id: str,
    body: WinnerDeclaration,
    current_user: dict = Depends(require_creator),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Declare the winner of a Confirmed contest.
    Moves the contest to Completed and marks the submission as Winner.
    """
    contest = await ContestService(db).declare_winner(contest_id, body, current_user["email"])
    return success_response(
        message="Winner declared successfully",
        data={"contest": serialize_document(contest)}
    )
