from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Dict, List
from collections import Counter
from app.models.contest.contest import ContestStatus
from app.utils.serializers import to_object_id


def calculate_win_percentage(wins: int, participations: int) -> float:
    """wins / participations * 100, rounded to 2 decimals; 0 with no participations"""
    if participations <= 0:
        return 0.0
    return round(wins / participations * 100, 2)


class StatsService:
    """Dashboard aggregations, recomputed from source collections on every call"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.contests = db.contests
        self.orders = db.orders
        self.users = db.users

    async def _status_histogram(self, match: Dict) -> Dict[str, int]:
        pipeline = [
            {"$match": match},
            {"$group": {"_id": "$status", "count": {"$sum": 1}}}
        ]
        rows = await self.contests.aggregate(pipeline).to_list(length=None)
        histogram = {status.value: 0 for status in ContestStatus}
        for row in rows:
            histogram[row["_id"]] = row["count"]
        return histogram

    async def _order_totals(self, match: Dict) -> Dict[str, float]:
        pipeline = [
            {"$match": match},
            {"$group": {
                "_id": None,
                "revenue": {"$sum": "$contest_fee"},
                "orders": {"$sum": 1}
            }}
        ]
        rows = await self.orders.aggregate(pipeline).to_list(length=1)
        if not rows:
            return {"revenue": 0, "orders": 0}
        return {"revenue": rows[0]["revenue"], "orders": rows[0]["orders"]}

    async def get_participant_stats(self, email: str) -> Dict:
        """
        Participation, wins and win percentage for one participant, plus a
        per-category breakdown of the contests they entered.
        """
        email = email.lower()
        orders = await self.orders.find(
            {"participant": email},
            {"contest_id": 1, "category": 1}
        ).to_list(length=None)
        participated = len(orders)

        won_contests = await self.contests.find(
            {"status": ContestStatus.COMPLETED.value, "winner.email": email},
            {"prize_money": 1}
        ).to_list(length=None)
        wins = len(won_contests)

        # Join orders to contests through the canonical contest id
        object_ids = [oid for oid in (to_object_id(o.get("contest_id")) for o in orders) if oid]
        contests = await self.contests.find(
            {"_id": {"$in": object_ids}},
            {"category": 1}
        ).to_list(length=None)
        category_by_id = {str(c["_id"]): c.get("category") for c in contests}

        categories = Counter(
            category_by_id.get(o.get("contest_id")) or o.get("category") or "Uncategorized"
            for o in orders
        )

        return {
            "participated": participated,
            "wins": wins,
            "win_percentage": calculate_win_percentage(wins, participated),
            "total_prize_won": sum(c.get("prize_money", 0) for c in won_contests),
            "category_breakdown": [
                {"category": category, "count": count}
                for category, count in categories.most_common()
            ]
        }

    async def get_creator_stats(self, email: str) -> Dict:
        """Contests, revenue and participants across one creator's contests"""
        email = email.lower()
        contests = await self.contests.find(
            {"contest_creator.email": email},
            {"_id": 1}
        ).to_list(length=None)
        contest_ids = [str(c["_id"]) for c in contests]

        totals = {"revenue": 0, "orders": 0}
        if contest_ids:
            totals = await self._order_totals({"contest_id": {"$in": contest_ids}})

        return {
            "total_contests": len(contest_ids),
            "total_revenue": totals["revenue"],
            "total_participants": totals["orders"],
            "contests_by_status": await self._status_histogram({"contest_creator.email": email})
        }

    async def get_admin_stats(self) -> Dict:
        """Platform-wide counts"""
        totals = await self._order_totals({})

        role_rows = await self.users.aggregate([
            {"$group": {"_id": "$role", "count": {"$sum": 1}}}
        ]).to_list(length=None)

        return {
            "total_users": await self.users.count_documents({}),
            "users_by_role": {row["_id"]: row["count"] for row in role_rows if row["_id"]},
            "total_contests": await self.contests.count_documents({}),
            "total_orders": totals["orders"],
            "total_revenue": totals["revenue"],
            "contests_by_status": await self._status_histogram({})
        }
