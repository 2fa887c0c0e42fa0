from datetime import datetime, timedelta

from conftest import ADMIN, CREATOR, OTHER_CREATOR, PARTICIPANT, auth, make_contest


async def submit(client, contest, email=PARTICIPANT, task="https://drive.test/entry"):
    return await client.post(
        "/submit-task",
        headers=auth(email),
        json={"contest_id": str(contest["_id"]), "task": task}
    )


async def test_participant_submits_once(client, db, users):
    contest = await make_contest(db, participants=[PARTICIPANT], participants_count=1)

    first = await submit(client, contest)
    second = await submit(client, contest, task="https://drive.test/second")

    assert first.status_code == 201
    submission = first.json()["data"]["submission"]
    assert submission["status"] == "Pending"
    assert submission["email"] == PARTICIPANT
    assert submission["contest_id"] == str(contest["_id"])
    assert second.status_code == 409
    assert await db.submissions.count_documents({}) == 1


async def test_non_participant_cannot_submit(client, db, users):
    contest = await make_contest(db)

    response = await submit(client, contest)

    assert response.status_code == 403
    assert await db.submissions.count_documents({}) == 0


async def test_submission_closed_after_deadline(client, db, users):
    contest = await make_contest(
        db,
        participants=[PARTICIPANT],
        participants_count=1,
        deadline=datetime.utcnow() - timedelta(days=1)
    )

    response = await submit(client, contest)

    assert response.status_code == 400


async def test_submission_requires_confirmed_contest(client, db, users):
    contest = await make_contest(db, status="Completed", participants=[PARTICIPANT])

    response = await submit(client, contest)

    assert response.status_code == 400


async def test_submission_status(client, db, users):
    contest = await make_contest(db, participants=[PARTICIPANT], participants_count=1)
    url = f"/contest-submission-status/{contest['_id']}/{PARTICIPANT}"

    before = await client.get(url, headers=auth(PARTICIPANT))
    await submit(client, contest)
    after = await client.get(url, headers=auth(PARTICIPANT))

    assert before.json()["data"]["submitted"] is False
    assert after.json()["data"]["submitted"] is True


async def test_contest_submissions_visible_to_owner_and_admin(client, db, users):
    contest = await make_contest(db, participants=[PARTICIPANT], participants_count=1)
    await submit(client, contest)
    url = f"/contest-submissions/{contest['_id']}"

    owner = await client.get(url, headers=auth(CREATOR))
    admin = await client.get(url, headers=auth(ADMIN))
    stranger = await client.get(url, headers=auth(OTHER_CREATOR))

    assert len(owner.json()["data"]["submissions"]) == 1
    assert admin.status_code == 200
    assert stranger.status_code == 403


async def test_creator_submissions_only_for_own_email(client, db, users):
    contest = await make_contest(db, participants=[PARTICIPANT], participants_count=1)
    await make_contest(db, creator=OTHER_CREATOR)
    await submit(client, contest)

    own = await client.get(f"/creator-submissions/{CREATOR}", headers=auth(CREATOR))
    other = await client.get(f"/creator-submissions/{CREATOR}", headers=auth(OTHER_CREATOR))

    assert own.status_code == 200
    assert len(own.json()["data"]["submissions"]) == 1
    assert other.status_code == 403
