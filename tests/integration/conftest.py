"""Integration test fixtures.

Provides a real MongoDB via testcontainers. Each test gets a fresh database
with the application indexes in place.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

import pytest
from pymongo import AsyncMongoClient
from testcontainers.mongodb import MongoDbContainer

from app.database.connection import ensure_indexes


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator

    from pymongo.asynchronous.database import AsyncDatabase


pytestmark = pytest.mark.integration


@pytest.fixture(scope="session")
def mongo_container() -> Generator[MongoDbContainer]:
    """Start a MongoDB container for the test session."""
    with MongoDbContainer("mongo:7") as mongo:
        yield mongo


@pytest.fixture(scope="session")
def mongo_url(mongo_container: MongoDbContainer) -> str:
    return mongo_container.get_connection_url()


@pytest.fixture
async def database(mongo_url: str) -> AsyncGenerator[AsyncDatabase[dict[str, Any]]]:
    """A throwaway database, dropped after the test."""
    client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(mongo_url, tz_aware=True)
    name = f"test_{uuid4().hex[:12]}"
    db = client[name]
    try:
        await ensure_indexes(db)
        yield db
    finally:
        await client.drop_database(name)
        await client.close()
