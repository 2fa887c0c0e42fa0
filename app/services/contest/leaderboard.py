from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Dict
from app.models.contest.contest import ContestStatus

RECENT_WINNERS_LIMIT = 6


class LeaderboardService:
    """Winner boards - calculated from completed contests on every call"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.contests = db.contests

    @staticmethod
    def _winners_match() -> Dict:
        return {
            "status": ContestStatus.COMPLETED.value,
            "winner": {"$exists": True}
        }

    async def get_recent_winners(self, limit: int = RECENT_WINNERS_LIMIT) -> Dict:
        """
        Most recent declared winners (newest first) plus all-time totals:
        number of declared winners and total prize money awarded.
        """
        cursor = self.contests.find(
            self._winners_match(),
            {"name": 1, "image": 1, "category": 1, "prize_money": 1, "winner": 1}
        ).sort("winner.declared_at", -1).limit(limit)
        recent = await cursor.to_list(length=limit)

        rows = await self.contests.aggregate([
            {"$match": self._winners_match()},
            {"$group": {
                "_id": None,
                "total_winners": {"$sum": 1},
                "total_prize_money": {"$sum": "$prize_money"}
            }}
        ]).to_list(length=1)
        totals = rows[0] if rows else {"total_winners": 0, "total_prize_money": 0}

        return {
            "recent_winners": recent,
            "total_winners": totals["total_winners"],
            "total_prize_money": totals["total_prize_money"]
        }

    async def get_top_winners(self, limit: int = 10) -> List[Dict]:
        """Winners ranked by number of contests won (ties: prize money)"""
        pipeline = [
            {"$match": self._winners_match()},
            {"$group": {
                "_id": "$winner.email",
                "name": {"$first": "$winner.name"},
                "photo": {"$first": "$winner.photo"},
                "wins": {"$sum": 1},
                "total_prize_money": {"$sum": "$prize_money"}
            }},
            {"$sort": {"wins": -1, "total_prize_money": -1}},
            {"$limit": limit}
        ]
        rows = await self.contests.aggregate(pipeline).to_list(length=limit)

        ranking = []
        for position, row in enumerate(rows, start=1):
            ranking.append({
                "rank": position,
                "email": row["_id"],
                "name": row.get("name"),
                "photo": row.get("photo"),
                "wins": row["wins"],
                "total_prize_money": row["total_prize_money"]
            })
        return ranking

    async def get_winning_contests(self, email: str) -> List[Dict]:
        cursor = self.contests.find({
            "status": ContestStatus.COMPLETED.value,
            "winner.email": email.lower()
        }).sort("winner.declared_at", -1)
        return await cursor.to_list(length=None)
