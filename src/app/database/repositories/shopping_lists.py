"""Shopping list repository.

One document per user. Read-modify-write sequences (merge, toggle, remove)
use ``replace_items_if_unchanged`` as a compare-and-set on ``updatedAt`` so a
concurrent writer is detected instead of silently overwritten.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.database.connection import SHOPPING_LISTS, get_database
from app.database.documents import ShoppingItem, ShoppingListDocument


if TYPE_CHECKING:
    from datetime import datetime

    from pymongo.asynchronous.collection import AsyncCollection
    from pymongo.asynchronous.database import AsyncDatabase


class ShoppingListRepository:
    """Data access for the ``shopping_lists`` collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._database = database

    @property
    def collection(self) -> AsyncCollection[dict[str, Any]]:
        database = self._database if self._database is not None else get_database()
        return database[SHOPPING_LISTS]

    async def get(self, user_id: str) -> ShoppingListDocument | None:
        raw = await self.collection.find_one({"userId": user_id})
        return ShoppingListDocument.from_mongo(raw) if raw else None

    async def replace_items(
        self,
        user_id: str,
        items: list[ShoppingItem],
        now: datetime,
    ) -> ShoppingListDocument:
        """Overwrite the whole list, creating it if needed."""
        raw = await self.collection.find_one_and_update(
            {"userId": user_id},
            {"$set": {"items": [i.to_mongo() for i in items], "updatedAt": now}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return ShoppingListDocument.from_mongo(raw)

    async def replace_items_if_unchanged(
        self,
        user_id: str,
        items: list[ShoppingItem],
        expected_updated_at: datetime | None,
        now: datetime,
    ) -> ShoppingListDocument | None:
        """Write ``items`` only if the list was not modified since it was read.

        ``expected_updated_at`` of ``None`` means the caller saw no list; the
        write then only succeeds by creating it. Returns ``None`` on conflict.
        """
        update = {"$set": {"items": [i.to_mongo() for i in items], "updatedAt": now}}
        if expected_updated_at is None:
            try:
                await self.collection.insert_one(
                    {"userId": user_id, **update["$set"]}
                )
            except DuplicateKeyError:
                return None
            return await self.get(user_id)

        raw = await self.collection.find_one_and_update(
            {"userId": user_id, "updatedAt": expected_updated_at},
            update,
            return_document=ReturnDocument.AFTER,
        )
        return ShoppingListDocument.from_mongo(raw) if raw else None
