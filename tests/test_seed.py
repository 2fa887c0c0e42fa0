from seed_database import DEMO_CONTESTS, bootstrap_admin, seed_demo_contests
from conftest import PARTICIPANT, make_user


async def test_bootstrap_admin_creates_user(db):
    await bootstrap_admin(db, "Root@X.com")

    user = await db.users.find_one({"email": "root@x.com"})
    assert user["role"] == "admin"


async def test_bootstrap_admin_promotes_and_clears_request(db):
    await make_user(db, PARTICIPANT)
    await db.creator_requests.insert_one({"email": PARTICIPANT})

    await bootstrap_admin(db, PARTICIPANT)

    assert (await db.users.find_one({"email": PARTICIPANT}))["role"] == "admin"
    assert await db.users.count_documents({}) == 1
    assert await db.creator_requests.count_documents({}) == 0


async def test_demo_contests_are_seeded_once(db):
    await seed_demo_contests(db)
    await seed_demo_contests(db)

    assert await db.contests.count_documents({}) == len(DEMO_CONTESTS)
    async for contest in db.contests.find({}):
        assert ("winner" in contest) == (contest["status"] == "Completed")
