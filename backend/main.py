import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from motor.motor_asyncio import AsyncIOMotorDatabase
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import HOST, LOG_LEVEL, PORT
from dates import format_date, parse_date
from database import check_db, create_client, get_database
from deps import get_repository
from errors import NotFound, TrackerError, ValidationError
from logging_config import setup_logging
from repository import TrackerRepository


BASE_DIR = Path(__file__).resolve().parent
VIEWS_DIR = BASE_DIR / "views"
PUBLIC_DIR = BASE_DIR / "public"

logger = logging.getLogger(__name__)


async def read_body(request: Request) -> dict:
    """Return the request body as a dict, from JSON or from a posted form."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as exc:
            raise ValidationError("Malformed JSON body") from exc
        if not isinstance(payload, dict):
            raise ValidationError("JSON body must be an object")
        return payload
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return dict(form)
    return {}


def parse_query_date(value: Optional[str], name: str):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name} date format.")


def parse_limit(value: Optional[str]) -> Optional[int]:
    # 0 means "no limit", as with a Mongo cursor.
    if value is None:
        return None
    try:
        limit = int(value.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid limit.")
    if limit < 0:
        raise HTTPException(status_code=400, detail="Invalid limit.")
    return limit


def create_app(database: Optional[AsyncIOMotorDatabase] = None) -> FastAPI:
    """Build the app around ``database``, or around a fresh client from config."""
    setup_logging(LOG_LEVEL)

    client = None
    if database is None:
        client = create_client()
        database = get_database(client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if client is not None:
            await check_db(client)
        yield
        if client is not None:
            client.close()

    app = FastAPI(title="Exercise Tracker", lifespan=lifespan)
    app.state.repository = TrackerRepository(database)

    # --- CORS (the API is meant to be called from any origin)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(VIEWS_DIR / "index.html")

    # ------------------------- USERS -------------------------

    @app.post("/api/users")
    async def create_user(
        request: Request,
        repo: TrackerRepository = Depends(get_repository),
    ):
        try:
            body = await read_body(request)
            user = await repo.create_user(body.get("username"))
        except TrackerError:
            logger.exception("Unable to create user")
            raise HTTPException(status_code=500, detail="Unable to create user")
        return {"username": user.username, "_id": user.id}

    @app.get("/api/users")
    async def list_users(repo: TrackerRepository = Depends(get_repository)):
        try:
            users = await repo.list_users()
        except TrackerError:
            logger.exception("Unable to fetch users")
            raise HTTPException(status_code=500, detail="Unable to fetch users")
        return [{"username": user.username, "_id": user.id} for user in users]

    # ------------------------- EXERCISES -------------------------

    @app.post("/api/users/{user_id}/exercises")
    async def add_exercise(
        user_id: str,
        request: Request,
        repo: TrackerRepository = Depends(get_repository),
    ):
        # The user is checked before the body so an unknown id is always a 404.
        try:
            user = await repo.find_user_by_id(user_id)
            body = await read_body(request)
            exercise = await repo.create_exercise(
                user.id,
                body.get("description"),
                body.get("duration"),
                body.get("date"),
            )
        except NotFound:
            raise HTTPException(status_code=404, detail="User not found")
        except TrackerError:
            logger.exception("Unable to add exercise for user %s", user_id)
            raise HTTPException(status_code=500, detail="Unable to add exercise")

        return {
            "username": user.username,
            "description": exercise.description,
            "duration": exercise.duration,
            "date": format_date(exercise.date),
            "_id": user.id,
        }

    @app.get("/api/users/{user_id}/logs")
    async def get_logs(
        user_id: str,
        date_from: Optional[str] = Query(None, alias="from"),
        date_to: Optional[str] = Query(None, alias="to"),
        limit: Optional[str] = Query(None),
        repo: TrackerRepository = Depends(get_repository),
    ):
        try:
            user = await repo.find_user_by_id(user_id)
        except NotFound:
            raise HTTPException(status_code=404, detail="User not found")
        except TrackerError:
            logger.exception("Unable to fetch logs for user %s", user_id)
            raise HTTPException(status_code=500, detail="Unable to fetch logs")

        start = parse_query_date(date_from, "from")
        end = parse_query_date(date_to, "to")
        max_entries = parse_limit(limit)

        try:
            exercises = await repo.query_exercise_log(user.id, start, end, max_entries)
        except TrackerError:
            logger.exception("Unable to fetch logs for user %s", user_id)
            raise HTTPException(status_code=500, detail="Unable to fetch logs")

        log = [
            {
                "description": exercise.description,
                "duration": exercise.duration,
                "date": format_date(exercise.date),
            }
            for exercise in exercises
        ]
        return {"username": user.username, "count": len(log), "_id": user.id, "log": log}

    # Mounted last: it answers every path no route above claims.
    app.mount("/", StaticFiles(directory=PUBLIC_DIR), name="public")

    return app


if __name__ == "__main__":
    import uvicorn

    # Same as: uvicorn main:create_app --factory
    uvicorn.run("main:create_app", factory=True, host=HOST, port=PORT)
