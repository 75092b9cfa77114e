import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.config import settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)

CLIENTS_COLLECTION = "clients"


class MongoDatabase:
    """MongoDB connection manager, opened at startup and closed at shutdown."""

    def __init__(self, url: str, database_name: str):
        self.url = url
        self.database_name = database_name
        self.client: AsyncIOMotorClient | None = None
        self.db: AsyncIOMotorDatabase | None = None
        self.indexes_ready = False

    async def connect(self) -> None:
        """Connect and ensure indexes. Failure is logged, not raised."""
        self.client = AsyncIOMotorClient(self.url, tz_aware=True)
        self.db = self.client[self.database_name]
        try:
            await self.client.admin.command("ping")
            await self.ensure_indexes()
        except PyMongoError as exc:
            logger.error("MongoDB connection error: %s", exc)
            return
        logger.info("Connected to MongoDB: %s", self.database_name)

    async def close(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("Disconnected from MongoDB")
        self.client = None
        self.db = None
        self.indexes_ready = False

    async def create_indexes(self) -> None:
        # Phone numbers identify clients
        await self.db[CLIENTS_COLLECTION].create_index("phone", unique=True)

    async def ensure_indexes(self) -> None:
        """Create indexes once; until that succeeds every call tries again."""
        if self.indexes_ready:
            return
        await self.create_indexes()
        self.indexes_ready = True
        logger.info("MongoDB indexes ready on %s", self.database_name)


mongodb = MongoDatabase(settings.DATABASE_URL, settings.DATABASE_NAME)


async def get_db() -> AsyncIOMotorDatabase:
    """
    Get database instance.

    Requests are refused until the unique indexes exist, so a store that
    was down at startup cannot accept duplicate phones once it is back.
    """
    if mongodb.db is None:
        raise StorageError("Database is not connected")
    try:
        await mongodb.ensure_indexes()
    except PyMongoError as exc:
        logger.error("MongoDB indexes not ready: %s", exc)
        raise StorageError(f"Database is not ready: {exc}")
    return mongodb.db
