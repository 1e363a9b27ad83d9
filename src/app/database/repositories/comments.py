"""Comment repository."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pymongo import DESCENDING, ReturnDocument

from app.database.connection import COMMENTS, get_database
from app.database.documents import CommentDocument, to_document_id


if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from datetime import datetime

    from pymongo.asynchronous.collection import AsyncCollection
    from pymongo.asynchronous.database import AsyncDatabase


class CommentRepository:
    """Data access for the ``comments`` collection.

    Likes live in the comment's ``likes`` array; no separate counter is
    stored, so the count can never disagree with the set.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._database = database

    @property
    def collection(self) -> AsyncCollection[dict[str, Any]]:
        database = self._database if self._database is not None else get_database()
        return database[COMMENTS]

    async def get(self, comment_id: str) -> CommentDocument | None:
        raw = await self.collection.find_one({"_id": to_document_id(comment_id)})
        return CommentDocument.from_mongo(raw) if raw else None

    async def list_for_recipe(self, recipe_id: str) -> list[CommentDocument]:
        """All comments and replies of a recipe, newest first."""
        cursor = self.collection.find({"recipeId": recipe_id}).sort(
            "createdAt", DESCENDING
        )
        return [CommentDocument.from_mongo(raw) async for raw in cursor]

    async def insert(self, fields: dict[str, Any]) -> CommentDocument:
        result = await self.collection.insert_one(dict(fields))
        return CommentDocument.from_mongo({**fields, "_id": result.inserted_id})

    async def update_content(
        self,
        comment_id: str,
        content: str,
        updated_at: datetime,
    ) -> CommentDocument | None:
        raw = await self.collection.find_one_and_update(
            {"_id": to_document_id(comment_id)},
            {"$set": {"content": content, "updatedAt": updated_at}},
            return_document=ReturnDocument.AFTER,
        )
        return CommentDocument.from_mongo(raw) if raw else None

    async def delete(self, comment_id: str) -> bool:
        result = await self.collection.delete_one({"_id": to_document_id(comment_id)})
        return result.deleted_count == 1

    async def delete_for_recipe(self, recipe_id: str) -> int:
        result = await self.collection.delete_many({"recipeId": recipe_id})
        return result.deleted_count

    async def toggle_like(
        self,
        comment_id: str,
        user_id: str,
    ) -> CommentDocument | None:
        """Flip ``user_id``'s membership in ``likes`` in one atomic update."""
        likes = {"$ifNull": ["$likes", []]}
        raw = await self.collection.find_one_and_update(
            {"_id": to_document_id(comment_id)},
            [
                {
                    "$set": {
                        "likes": {
                            "$cond": [
                                {"$in": [user_id, likes]},
                                {"$setDifference": [likes, [user_id]]},
                                {"$setUnion": [likes, [user_id]]},
                            ]
                        }
                    }
                }
            ],
            return_document=ReturnDocument.AFTER,
        )
        return CommentDocument.from_mongo(raw) if raw else None

    async def iter_thread_index(self) -> AsyncIterator[tuple[str, str, str | None]]:
        """Yield ``(recipe_id, comment_id, parent_id)`` for every comment."""
        cursor = self.collection.find(
            {}, projection={"recipeId": 1, "parentId": 1}
        )
        async for raw in cursor:
            parent_id = raw.get("parentId")
            yield (
                str(raw.get("recipeId")),
                str(raw["_id"]),
                str(parent_id) if parent_id else None,
            )
