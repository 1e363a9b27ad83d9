"""MongoDB client management.

This module provides:
- One process-wide ``AsyncMongoClient`` opened and closed by the lifespan
- Index creation for the collections the services query
- A ping-based health check
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient, IndexModel
from pymongo.errors import PyMongoError

from app.core.config import get_settings
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from pymongo.asynchronous.database import AsyncDatabase

logger = get_logger(__name__)

USERS = "users"
RECIPES = "recipes"
COMMENTS = "comments"
MEAL_PLANS = "meal_plans"
SHOPPING_LISTS = "shopping_lists"

INDEXES: dict[str, list[IndexModel]] = {
    RECIPES: [
        IndexModel([("status", ASCENDING), ("createdAt", DESCENDING)]),
        IndexModel([("authorId", ASCENDING), ("createdAt", DESCENDING)]),
    ],
    COMMENTS: [
        IndexModel([("recipeId", ASCENDING), ("createdAt", DESCENDING)]),
        IndexModel([("parentId", ASCENDING)]),
    ],
    MEAL_PLANS: [
        IndexModel([("userId", ASCENDING), ("date", ASCENDING)], unique=True),
    ],
    SHOPPING_LISTS: [
        IndexModel([("userId", ASCENDING)], unique=True),
    ],
    USERS: [
        IndexModel([("email", ASCENDING)], unique=True, sparse=True),
        # Multikey; repair and recipe deletion find users by mirrored id.
        IndexModel([("likedRecipes", ASCENDING)]),
        IndexModel([("savedRecipes", ASCENDING)]),
    ],
}

_client: AsyncMongoClient[dict[str, Any]] | None = None


async def init_database() -> None:
    """Open the client, verify connectivity and ensure indexes.

    Should be called during application startup (lifespan).
    """
    global _client  # noqa: PLW0603

    settings = get_settings()
    logger.info(
        "Initializing MongoDB client",
        host=settings.mongodb.host,
        port=settings.mongodb.port,
        database=settings.mongodb.name,
    )

    _client = AsyncMongoClient(
        settings.mongodb_url,
        minPoolSize=settings.mongodb.min_pool_size,
        maxPoolSize=settings.mongodb.max_pool_size,
        serverSelectionTimeoutMS=settings.mongodb.server_selection_timeout_ms,
        tls=settings.mongodb.tls,
        tz_aware=True,
    )

    try:
        await _client.admin.command("ping")
        await ensure_indexes(get_database())
    except PyMongoError:
        logger.exception("Failed to connect to MongoDB")
        raise
    logger.info("MongoDB connection established successfully")


async def ensure_indexes(database: AsyncDatabase[dict[str, Any]]) -> None:
    """Create the indexes in ``INDEXES``; existing ones are left untouched."""
    for collection, indexes in INDEXES.items():
        await database[collection].create_indexes(indexes)
    logger.debug("MongoDB indexes ensured", collections=list(INDEXES))


async def close_database() -> None:
    """Close the client.

    Should be called during application shutdown (lifespan).
    """
    global _client  # noqa: PLW0603

    if _client is not None:
        await _client.close()
        _client = None
    logger.info("MongoDB connection closed")


def get_database() -> AsyncDatabase[dict[str, Any]]:
    """Return the application database.

    Raises:
        RuntimeError: If ``init_database`` has not run.
    """
    if _client is None:
        msg = "MongoDB client not initialized. Call init_database() first."
        raise RuntimeError(msg)
    return _client[get_settings().mongodb.name]


async def check_database_health() -> str:
    """Return ``healthy``, ``unhealthy`` or ``not_initialized``."""
    if _client is None:
        return "not_initialized"
    try:
        await _client.admin.command("ping")
    except PyMongoError:
        return "unhealthy"
    return "healthy"
