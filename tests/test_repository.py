import os
import sys
from datetime import date

import pytest
from mongomock_motor import AsyncMongoMockClient

sys.path.append(os.path.join(os.path.dirname(os.path.dirname(__file__)), "backend"))
from errors import NotFound, ValidationError
from repository import TrackerRepository


@pytest.fixture
def repo():
    return TrackerRepository(AsyncMongoMockClient()["tracker_test"])


@pytest.mark.asyncio
async def test_create_and_list_users(repo):
    alice = await repo.create_user("alice")
    bob = await repo.create_user("bob")
    dup = await repo.create_user("alice")
    assert len({alice.id, bob.id, dup.id}) == 3

    users = await repo.list_users()
    assert [u.username for u in users] == ["alice", "bob", "alice"]
    assert [u.id for u in users] == [alice.id, bob.id, dup.id]


@pytest.mark.asyncio
@pytest.mark.parametrize("username", [None, ""])
async def test_create_user_requires_username(repo, username):
    with pytest.raises(ValidationError):
        await repo.create_user(username)
    assert await repo.list_users() == []


@pytest.mark.asyncio
async def test_find_user_by_id(repo):
    user = await repo.create_user("alice")
    assert (await repo.find_user_by_id(user.id)).username == "alice"

    with pytest.raises(NotFound):
        await repo.find_user_by_id("0123456789abcdef01234567")
    with pytest.raises(ValidationError):
        await repo.find_user_by_id("not-an-id")


@pytest.mark.asyncio
async def test_create_exercise_defaults_to_today(repo):
    user = await repo.create_user("alice")
    exercise = await repo.create_exercise(user.id, "swim", "20")
    assert exercise.date == date.today()
    assert exercise.duration == 20
    assert exercise.user_id == user.id


@pytest.mark.asyncio
async def test_create_exercise_validates(repo):
    user = await repo.create_user("alice")
    with pytest.raises(ValidationError):
        await repo.create_exercise(user.id, None, 10)
    with pytest.raises(ValidationError):
        await repo.create_exercise(user.id, "run", None)
    with pytest.raises(ValidationError):
        await repo.create_exercise(user.id, "run", 10, "notadate")
    assert await repo.query_exercise_log(user.id) == []


@pytest.mark.asyncio
async def test_query_exercise_log_filters(repo):
    alice = await repo.create_user("alice")
    bob = await repo.create_user("bob")
    for day in (3, 1, 5, 2, 4):
        await repo.create_exercise(alice.id, f"run {day}", day * 10, f"2023-01-0{day}")
    await repo.create_exercise(bob.id, "walk", 15, "2023-01-03")

    log = await repo.query_exercise_log(alice.id)
    assert [e.description for e in log] == ["run 3", "run 1", "run 5", "run 2", "run 4"]

    ranged = await repo.query_exercise_log(alice.id, date(2023, 1, 2), date(2023, 1, 4))
    assert sorted(e.date.day for e in ranged) == [2, 3, 4]

    since = await repo.query_exercise_log(alice.id, date_from=date(2023, 1, 4))
    assert sorted(e.date.day for e in since) == [4, 5]

    limited = await repo.query_exercise_log(alice.id, limit=2)
    assert [e.description for e in limited] == ["run 3", "run 1"]

    assert len(await repo.query_exercise_log(alice.id, limit=0)) == 5
    assert await repo.query_exercise_log(alice.id, date(2024, 1, 1)) == []
