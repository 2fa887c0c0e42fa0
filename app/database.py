import os
import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Optional
from dotenv import load_dotenv
from pymongo import ASCENDING, DESCENDING

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class Database:
    client: Optional[AsyncIOMotorClient] = None

    @classmethod
    async def connect_db(cls):
        """Connect to MongoDB"""
        mongodb_url = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
        cls.client = AsyncIOMotorClient(mongodb_url)
        logger.info("[OK] Connected to MongoDB")

        # Create indexes
        await cls.create_indexes()

    @classmethod
    async def create_indexes(cls, db: Optional[AsyncIOMotorDatabase] = None):
        """Create database indexes"""
        db = db if db is not None else cls.get_db()

        # Users: one record per verified email
        try:
            await db.users.create_index([("email", ASCENDING)], unique=True)
            logger.info("[OK] Created unique index on users.email")
        except Exception as e:
            logger.warning(f"[WARN] Index on users.email may already exist: {e}")

        # Orders: transaction_id is the settlement idempotency key
        try:
            await db.orders.create_index([("transaction_id", ASCENDING)], unique=True)
            await db.orders.create_index([("participant", ASCENDING)])
            await db.orders.create_index([("contest_id", ASCENDING)])
            logger.info("[OK] Created indexes on orders")
        except Exception as e:
            logger.warning(f"[WARN] Indexes on orders may already exist: {e}")

        # Submissions: one per (contest, participant)
        try:
            await db.submissions.create_index(
                [("contest_id", ASCENDING), ("email", ASCENDING)],
                unique=True
            )
            logger.info("[OK] Created unique index on submissions")
        except Exception as e:
            logger.warning(f"[WARN] Index on submissions may already exist: {e}")

        # Contests
        try:
            await db.contests.create_index([("status", ASCENDING), ("created_at", DESCENDING)])
            await db.contests.create_index([("contest_creator.email", ASCENDING)])
            await db.contests.create_index([("winner.declared_at", DESCENDING)], sparse=True)
            logger.info("[OK] Created indexes on contests")
        except Exception as e:
            logger.warning(f"[WARN] Indexes on contests may already exist: {e}")

        # Creator requests
        try:
            await db.creator_requests.create_index([("email", ASCENDING)], unique=True)
            logger.info("[OK] Created unique index on creator_requests.email")
        except Exception as e:
            logger.warning(f"[WARN] Index on creator_requests.email may already exist: {e}")

    @classmethod
    async def close_db(cls):
        """Close MongoDB connection"""
        if cls.client:
            cls.client.close()
            logger.info("[OK] Disconnected from MongoDB")

    @classmethod
    def get_db(cls):
        """Get database instance"""
        database_name = os.getenv("DATABASE_NAME", "contests_db")
        return cls.client[database_name]


async def get_database():
    """Dependency to get database"""
    return Database.get_db()
