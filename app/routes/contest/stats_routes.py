from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from app.database import get_database
from app.services.contest.stats import StatsService
from app.routes.auth.dependencies import get_current_user, require_admin, require_creator
from app.utils.response import success_response

router = APIRouter(tags=["Statistics"])


@router.get("/my-stats")
async def get_my_stats(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Participation count, wins and win percentage of the caller"""
    stats = await StatsService(db).get_participant_stats(current_user["email"])
    return success_response(
        message="Stats retrieved successfully",
        data={
            "participated": stats["participated"],
            "wins": stats["wins"],
            "win_percentage": stats["win_percentage"]
        }
    )


@router.get("/Participant-stats")
async def get_participant_stats(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Participant dashboard, including the per-category breakdown"""
    stats = await StatsService(db).get_participant_stats(current_user["email"])
    return success_response(message="Stats retrieved successfully", data=stats)


@router.get("/creator-stats")
async def get_creator_stats(
    current_user: dict = Depends(require_creator),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    stats = await StatsService(db).get_creator_stats(current_user["email"])
    return success_response(message="Stats retrieved successfully", data=stats)


@router.get("/admin-stats")
async def get_admin_stats(
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    stats = await StatsService(db).get_admin_stats()
    return success_response(message="Stats retrieved successfully", data=stats)
