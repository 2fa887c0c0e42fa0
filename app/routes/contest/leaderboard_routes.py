from fastapi import APIRouter, Query, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from app.database import get_database
from app.services.contest.leaderboard import LeaderboardService
from app.routes.auth.dependencies import get_current_user
from app.utils.response import success_response
from app.utils.serializers import serialize_documents

router = APIRouter(tags=["Leaderboard"])


@router.get("/winners-leaderboard")
async def get_winners_leaderboard(db: AsyncIOMotorDatabase = Depends(get_database)):
    """
    Latest declared winners plus all-time totals.

    Returns:
    - recent_winners: 6 most recent, newest first
    - total_winners: declared winners so far
    - total_prize_money: prize money awarded so far
    """
    board = await LeaderboardService(db).get_recent_winners()
    board["recent_winners"] = serialize_documents(board["recent_winners"])

    return success_response(
        message="Leaderboard retrieved successfully",
        data=board
    )


@router.get("/top-winners-ranking")
async def get_top_winners_ranking(
    limit: int = Query(10, ge=1, le=100, description="Number of top winners to return"),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Winners ranked by number of contests won"""
    ranking = await LeaderboardService(db).get_top_winners(limit=limit)
    return success_response(
        message="Ranking retrieved successfully",
        data={"ranking": ranking}
    )


@router.get("/my-winning-contests")
async def get_my_winning_contests(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    contests = await LeaderboardService(db).get_winning_contests(current_user["email"])
    return success_response(
        message="Winning contests retrieved successfully",
        data={"contests": serialize_documents(contests)}
    )
