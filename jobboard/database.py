import logging
from typing import Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING, TEXT

from jobboard.config import settings

logger = logging.getLogger("jobboard.database")

client = None
db = None


async def connect_to_mongo():
    global client, db

    if not settings.mongo_uri:
        raise ValueError("MONGO_URI environment variable is not set! Check your .env file.")

    timeout = settings.store_timeout_ms
    client = AsyncIOMotorClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=timeout,
        connectTimeoutMS=timeout,
        socketTimeoutMS=timeout,
    )
    db = client[settings.database_name]
    await client.admin.command("ping")
    await ensure_indexes(db)

    if "mongodb+srv" in settings.mongo_uri:
        logger.info("Connected to MongoDB Atlas (database=%s)", settings.database_name)
    else:
        logger.info("Connected to MongoDB (database=%s)", settings.database_name)


async def close_mongo_connection():
    if client:
        client.close()
        logger.info("MongoDB connection closed")


async def ensure_indexes(database):
    """Create the indexes the repositories rely on for uniqueness and lookups."""
    await database.users.create_index("email", unique=True)
    await database.users.create_index("password_reset_token", sparse=True)

    await database.jobs.create_index([("title", TEXT), ("company", TEXT), ("description", TEXT)])
    await database.jobs.create_index([("location", ASCENDING), ("job_type", ASCENDING)])
    await database.jobs.create_index("posted_by")
    await database.jobs.create_index([("created_at", DESCENDING)])

    # One application document per (job, applicant); re-applying reopens it
    await database.applications.create_index(
        [("job_id", ASCENDING), ("applicant_id", ASCENDING)], unique=True
    )
    await database.applications.create_index([("job_id", ASCENDING), ("status", ASCENDING)])
    await database.applications.create_index([("applicant_id", ASCENDING), ("status", ASCENDING)])
    await database.applications.create_index([("created_at", DESCENDING)])


def get_db():
    return db


def as_object_id(value) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if value is not None and ObjectId.is_valid(str(value)):
        return ObjectId(str(value))
    return None


def as_object_ids(values: Iterable) -> List[ObjectId]:
    return [oid for oid in (as_object_id(v) for v in values) if oid is not None]
