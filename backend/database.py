import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from config import DB_NAME, MONGO_URI


logger = logging.getLogger(__name__)


def create_client(uri: str = MONGO_URI) -> AsyncIOMotorClient:
    """One client per process; motor pools connections internally."""
    return AsyncIOMotorClient(uri)


def get_database(client: AsyncIOMotorClient, name: str = DB_NAME) -> AsyncIOMotorDatabase:
    # A database named in the URI wins over DB_NAME.
    return client.get_default_database(name)


async def check_db(client: AsyncIOMotorClient) -> None:
    """Fail-fast check so you instantly know Mongo is reachable."""
    await client.admin.command("ping")
    logger.info("MongoDB connection successful")
