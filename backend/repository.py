"""Data access for users and their exercises.

``TrackerRepository`` is the only code that talks to MongoDB. It is built
around an explicit database handle so the app (and the tests) decide which
store it runs against. Every driver failure is re-raised as ``StoreError``.
"""

from __future__ import annotations

import datetime
import logging
from typing import List, Optional

from bson import ObjectId
from bson.errors import BSONError, InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import PyMongoError

from dates import from_storage, to_storage
from errors import NotFound, StoreError, ValidationError
from models import Exercise, ExerciseCreate, User, UserCreate


logger = logging.getLogger(__name__)

# BSON encoding fails outside PyMongoError, e.g. ints wider than 64 bits.
STORE_ERRORS = (PyMongoError, BSONError, OverflowError)


def _object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as exc:
        raise ValidationError(f"Invalid identifier: {value!r}") from exc


def _user_from_doc(doc: dict) -> User:
    return User(id=str(doc["_id"]), username=doc["username"])


def _exercise_from_doc(doc: dict) -> Exercise:
    return Exercise(
        id=str(doc["_id"]),
        user_id=doc["userId"],
        description=doc["description"],
        duration=doc["duration"],
        date=from_storage(doc["date"]),
    )


class TrackerRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.users = db.users
        self.exercises = db.exercises

    async def create_user(self, username: Optional[str]) -> User:
        try:
            data = UserCreate(username=username)
        except PydanticValidationError as exc:
            raise ValidationError("username is required") from exc

        doc = data.model_dump()
        try:
            result = await self.users.insert_one(doc)
        except STORE_ERRORS as exc:
            raise StoreError("Unable to insert user") from exc

        logger.info("Created user %s (%s)", data.username, result.inserted_id)
        return User(id=str(result.inserted_id), username=data.username)

    async def list_users(self) -> List[User]:
        try:
            cursor = self.users.find({}, {"username": 1}, sort=[("_id", 1)])
            docs = await cursor.to_list(length=None)
        except STORE_ERRORS as exc:
            raise StoreError("Unable to list users") from exc
        return [_user_from_doc(doc) for doc in docs]

    async def find_user_by_id(self, user_id: str) -> User:
        oid = _object_id(user_id)
        try:
            doc = await self.users.find_one({"_id": oid})
        except STORE_ERRORS as exc:
            raise StoreError("Unable to load user") from exc
        if not doc:
            raise NotFound(f"User {user_id} not found")
        return _user_from_doc(doc)

    async def create_exercise(
        self,
        user_id: str,
        description: Optional[str],
        duration,
        date=None,
    ) -> Exercise:
        """Insert an exercise for ``user_id``.

        The caller is expected to have checked that the user exists; the
        store enforces no reference between the two collections.
        """
        try:
            data = ExerciseCreate(description=description, duration=duration, date=date)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc)) from exc

        exercise_date = data.date or datetime.date.today()
        doc = {
            "userId": user_id,
            "description": data.description,
            "duration": data.duration,
            "date": to_storage(exercise_date),
        }
        try:
            result = await self.exercises.insert_one(doc)
        except STORE_ERRORS as exc:
            raise StoreError("Unable to insert exercise") from exc

        logger.info("Logged exercise %s for user %s", result.inserted_id, user_id)
        return Exercise(
            id=str(result.inserted_id),
            user_id=user_id,
            description=data.description,
            duration=data.duration,
            date=exercise_date,
        )

    async def query_exercise_log(
        self,
        user_id: str,
        date_from: Optional[datetime.date] = None,
        date_to: Optional[datetime.date] = None,
        limit: Optional[int] = None,
    ) -> List[Exercise]:
        """Return a user's exercises in insertion order.

        ``date_from`` and ``date_to`` are inclusive. A ``limit`` of ``None``
        or ``0`` returns everything.
        """
        query: dict = {"userId": user_id}
        date_range = {}
        if date_from is not None:
            date_range["$gte"] = to_storage(date_from)
        if date_to is not None:
            date_range["$lte"] = to_storage(date_to)
        if date_range:
            query["date"] = date_range

        try:
            cursor = self.exercises.find(query, sort=[("_id", 1)], limit=limit or 0)
            docs = await cursor.to_list(length=None)
        except STORE_ERRORS as exc:
            raise StoreError("Unable to load exercise log") from exc
        return [_exercise_from_doc(doc) for doc in docs]
