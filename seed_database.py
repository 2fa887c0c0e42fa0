import asyncio
import os
import sys
from datetime import datetime, timedelta
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ReturnDocument
from dotenv import load_dotenv

from app.database import Database
from app.models.auth.user import UserRole
from app.models.contest.contest import ContestStatus

# Load environment variables
load_dotenv()

# MongoDB connection
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "contests_db")

DEMO_CREATOR = {
    "name": "Demo Creator",
    "email": "creator@contesthub.dev",
    "photo": None
}

# One contest per lifecycle status
DEMO_CONTESTS = [
    {
        "name": "Minimal Logo Challenge",
        "description": "Design a flat logo for a coffee brand.",
        "category": "Image Design",
        "prize_money": 500,
        "contest_fee": 10,
        "task_instruction": "Upload a PNG link of your logo.",
        "status": ContestStatus.CONFIRMED.value
    },
    {
        "name": "Flash Fiction Sprint",
        "description": "Tell a complete story in 300 words.",
        "category": "Article Writing",
        "prize_money": 200,
        "contest_fee": 5,
        "task_instruction": "Paste a link to your story.",
        "status": ContestStatus.PENDING.value
    },
    {
        "name": "Product Review Marathon",
        "description": "Review a gadget you own.",
        "category": "Gaming Review",
        "prize_money": 150,
        "contest_fee": 3,
        "task_instruction": "Share a video or article link.",
        "status": ContestStatus.REJECTED.value
    },
    {
        "name": "Startup Pitch Deck",
        "description": "Pitch a product in five slides.",
        "category": "Business Idea",
        "prize_money": 1000,
        "contest_fee": 25,
        "task_instruction": "Share your deck.",
        "status": ContestStatus.COMPLETED.value,
        "winner": {
            "name": "Demo Winner",
            "email": "winner@contesthub.dev",
            "photo": None,
            "submission_id": None
        }
    }
]


async def bootstrap_admin(db, email: str):
    """Give `email` the admin role, creating the user if needed"""
    print(f"\n[*] Granting admin role to {email}...")

    now = datetime.utcnow()
    user = await db.users.find_one_and_update(
        {"email": email.lower()},
        {
            "$set": {"role": UserRole.ADMIN.value, "role_updated_at": now},
            "$setOnInsert": {"name": None, "photo": None, "bio": None, "created_at": now}
        },
        upsert=True,
        return_document=ReturnDocument.AFTER
    )
    await db.creator_requests.delete_one({"email": email.lower()})
    print(f"  [OK] {user['email']} is now {user['role']}")


async def seed_demo_contests(db):
    """Insert demo contests, skipping names that already exist"""
    print("\n[*] Seeding demo contests...")

    now = datetime.utcnow()
    inserted = 0
    for data in DEMO_CONTESTS:
        if await db.contests.find_one({"name": data["name"]}):
            print(f"  [SKIP] {data['name']} already exists")
            continue

        contest = {
            **data,
            "image": None,
            "contest_creator": DEMO_CREATOR,
            "participants": [],
            "participants_count": 0,
            "deadline": now + timedelta(days=30),
            "created_at": now,
            "updated_at": now
        }
        if "winner" in contest:
            contest["winner"] = {**contest["winner"], "declared_at": now}
            contest["completed_at"] = now

        await db.contests.insert_one(contest)
        inserted += 1
        print(f"  [OK] {data['name']} ({data['status']})")

    print(f"\n[SUCCESS] Inserted {inserted}/{len(DEMO_CONTESTS)} demo contests")


async def main(admin_email: Optional[str] = None, demo: bool = False):
    """Main seed function"""
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    # Connect to MongoDB
    client = AsyncIOMotorClient(MONGODB_URL)
    db = client[DATABASE_NAME]

    try:
        print("\n[*] Creating indexes...")
        await Database.create_indexes(db)

        if admin_email:
            await bootstrap_admin(db, admin_email)

        if demo:
            await seed_demo_contests(db)

        print()
        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)

    finally:
        client.close()


if __name__ == "__main__":
    admin = None
    if "--admin" in sys.argv:
        position = sys.argv.index("--admin")
        if position + 1 >= len(sys.argv):
            print("Usage: python seed_database.py [--admin <email>] [--demo]")
            sys.exit(1)
        admin = sys.argv[position + 1]

    asyncio.run(main(admin_email=admin, demo="--demo" in sys.argv))
