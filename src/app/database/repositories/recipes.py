"""Recipe repository.

Every write is a single-document operation. Counter updates are expressed
as update pipelines so the clamp at zero is applied by the store in the
same atomic step as the change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pymongo import DESCENDING, ReturnDocument

from app.database.connection import RECIPES, get_database
from app.database.documents import RecipeDocument, to_document_id
from app.schemas.enums import RecipeStatus, SocialKind


if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pymongo.asynchronous.collection import AsyncCollection
    from pymongo.asynchronous.database import AsyncDatabase


# Membership set and counter field per social kind.
SOCIAL_FIELDS: dict[SocialKind, tuple[str, str]] = {
    SocialKind.LIKE: ("likedBy", "likesCount"),
    SocialKind.SAVE: ("savedBy", "savesCount"),
}

# Legacy recipes without a status are publicly visible.
VISIBLE_FILTER: dict[str, Any] = {
    "$or": [
        {"status": RecipeStatus.APPROVED.value},
        {"status": {"$exists": False}},
        {"status": None},
    ]
}


def status_filter(status: RecipeStatus | None) -> dict[str, Any]:
    """Store filter for an explicit status; ``None`` matches everything."""
    if status is None:
        return {}
    if status == RecipeStatus.APPROVED:
        return VISIBLE_FILTER
    return {"status": str(status)}


def clamped_add(field: str, delta: int) -> dict[str, Any]:
    """Pipeline expression for ``max(0, field + delta)``."""
    return {"$max": [0, {"$add": [{"$ifNull": [f"${field}", 0]}, delta]}]}


class RecipeRepository:
    """Data access for the ``recipes`` collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._database = database

    @property
    def collection(self) -> AsyncCollection[dict[str, Any]]:
        database = self._database if self._database is not None else get_database()
        return database[RECIPES]

    async def get(self, recipe_id: str) -> RecipeDocument | None:
        raw = await self.collection.find_one({"_id": to_document_id(recipe_id)})
        return RecipeDocument.from_mongo(raw) if raw else None

    async def exists(self, recipe_id: str) -> bool:
        count = await self.collection.count_documents(
            {"_id": to_document_id(recipe_id)}, limit=1
        )
        return count > 0

    async def get_many(self, recipe_ids: list[str]) -> list[RecipeDocument]:
        """Fetch recipes by id, preserving the order of ``recipe_ids``."""
        if not recipe_ids:
            return []
        cursor = self.collection.find(
            {"_id": {"$in": [to_document_id(r) for r in recipe_ids]}}
        )
        by_id = {
            recipe.id: recipe
            async for recipe in _documents(cursor)
        }
        return [by_id[r] for r in recipe_ids if r in by_id]

    async def find(
        self,
        query: dict[str, Any],
        *,
        skip: int = 0,
        limit: int = 0,
    ) -> list[RecipeDocument]:
        """Recipes matching ``query``, newest first."""
        cursor = (
            self.collection.find(query)
            .sort("createdAt", DESCENDING)
            .skip(skip)
            .limit(limit)
        )
        return [recipe async for recipe in _documents(cursor)]

    async def count(self, query: dict[str, Any]) -> int:
        return await self.collection.count_documents(query)

    async def insert(self, fields: dict[str, Any]) -> RecipeDocument:
        result = await self.collection.insert_one(dict(fields))
        return RecipeDocument.from_mongo({**fields, "_id": result.inserted_id})

    async def update_fields(
        self,
        recipe_id: str,
        fields: dict[str, Any],
    ) -> RecipeDocument | None:
        """``$set`` the given fields; ``None`` if the recipe does not exist."""
        raw = await self.collection.find_one_and_update(
            {"_id": to_document_id(recipe_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return RecipeDocument.from_mongo(raw) if raw else None

    async def delete(self, recipe_id: str) -> bool:
        result = await self.collection.delete_one({"_id": to_document_id(recipe_id)})
        return result.deleted_count == 1

    async def adjust_comments_count(self, recipe_id: str, delta: int) -> int | None:
        """Add ``delta`` to ``commentsCount``, never going below zero.

        Returns:
            The new count, or ``None`` if the recipe does not exist.
        """
        raw = await self.collection.find_one_and_update(
            {"_id": to_document_id(recipe_id)},
            [{"$set": {"commentsCount": clamped_add("commentsCount", delta)}}],
            projection={"commentsCount": 1},
            return_document=ReturnDocument.AFTER,
        )
        return int(raw["commentsCount"]) if raw else None

    async def apply_membership(
        self,
        recipe_id: str,
        user_id: str,
        kind: SocialKind,
        *,
        add: bool,
    ) -> RecipeDocument | None:
        """Add or remove ``user_id`` and move the counter by one, atomically.

        The filter only matches while the membership is still what the caller
        read, so the set and its counter always change together. ``None``
        means the recipe is gone or a concurrent toggle got there first.
        """
        set_field, count_field = SOCIAL_FIELDS[kind]
        current = {"$ifNull": [f"${set_field}", []]}
        if add:
            guard: Any = {"$ne": user_id}
            new_set = {"$setUnion": [current, [user_id]]}
        else:
            guard = user_id
            new_set = {"$setDifference": [current, [user_id]]}

        raw = await self.collection.find_one_and_update(
            {"_id": to_document_id(recipe_id), set_field: guard},
            [
                {
                    "$set": {
                        set_field: new_set,
                        count_field: clamped_add(count_field, 1 if add else -1),
                    }
                }
            ],
            return_document=ReturnDocument.AFTER,
        )
        return RecipeDocument.from_mongo(raw) if raw else None

    async def set_counters(self, recipe_id: str, counters: dict[str, int]) -> None:
        await self.collection.update_one(
            {"_id": to_document_id(recipe_id)}, {"$set": counters}
        )

    async def iter_social_state(self) -> AsyncIterator[RecipeDocument]:
        """Stream every recipe with only its social fields loaded."""
        cursor = self.collection.find(
            {},
            projection={
                "name": 1,
                "likedBy": 1,
                "savedBy": 1,
                "likesCount": 1,
                "savesCount": 1,
                "commentsCount": 1,
            },
        )
        async for recipe in _documents(cursor):
            yield recipe


async def _documents(cursor: Any) -> AsyncIterator[RecipeDocument]:
    async for raw in cursor:
        yield RecipeDocument.from_mongo(raw)
