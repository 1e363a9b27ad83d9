"""User repository.

Users are created by the account service; this service only reads them and
maintains the mirrored ``likedRecipes``/``savedRecipes`` lists plus the
health profile. Mirror writes upsert, so identities that have never been
stored locally still get a document.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pymongo import ASCENDING, ReturnDocument

from app.database.connection import USERS, get_database
from app.database.documents import UserDocument, to_document_id
from app.schemas.enums import SocialKind


if TYPE_CHECKING:
    from pymongo.asynchronous.collection import AsyncCollection
    from pymongo.asynchronous.database import AsyncDatabase


MIRROR_FIELDS: dict[SocialKind, str] = {
    SocialKind.LIKE: "likedRecipes",
    SocialKind.SAVE: "savedRecipes",
}

# Password hashes and reset tokens never leave the store.
_PUBLIC_PROJECTION = {"password": 0, "resetToken": 0, "resetTokenExpiry": 0}


class UserRepository:
    """Data access for the ``users`` collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._database = database

    @property
    def collection(self) -> AsyncCollection[dict[str, Any]]:
        database = self._database if self._database is not None else get_database()
        return database[USERS]

    async def get(self, user_id: str) -> UserDocument | None:
        raw = await self.collection.find_one(
            {"_id": to_document_id(user_id)}, projection=_PUBLIC_PROJECTION
        )
        return UserDocument.from_mongo(raw) if raw else None

    async def list_all(self) -> list[UserDocument]:
        cursor = self.collection.find({}, projection=_PUBLIC_PROJECTION).sort(
            "createdAt", ASCENDING
        )
        return [UserDocument.from_mongo(raw) async for raw in cursor]

    async def update_fields(
        self,
        user_id: str,
        fields: dict[str, Any],
        *,
        upsert: bool = False,
    ) -> UserDocument | None:
        raw = await self.collection.find_one_and_update(
            {"_id": to_document_id(user_id)},
            {"$set": fields},
            projection=_PUBLIC_PROJECTION,
            upsert=upsert,
            return_document=ReturnDocument.AFTER,
        )
        return UserDocument.from_mongo(raw) if raw else None

    async def delete(self, user_id: str) -> bool:
        result = await self.collection.delete_one({"_id": to_document_id(user_id)})
        return result.deleted_count == 1

    async def set_membership(
        self,
        user_id: str,
        recipe_id: str,
        kind: SocialKind,
        *,
        present: bool,
    ) -> UserDocument:
        """Mirror one recipe membership onto the user and return the user."""
        field = MIRROR_FIELDS[kind]
        operator = "$addToSet" if present else "$pull"
        raw = await self.collection.find_one_and_update(
            {"_id": to_document_id(user_id)},
            {operator: {field: recipe_id}},
            projection=_PUBLIC_PROJECTION,
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return UserDocument.from_mongo(raw)

    async def pull_recipe(self, recipe_id: str) -> int:
        """Remove a recipe id from every user's liked and saved lists."""
        result = await self.collection.update_many(
            {"$or": [{"likedRecipes": recipe_id}, {"savedRecipes": recipe_id}]},
            {"$pull": {"likedRecipes": recipe_id, "savedRecipes": recipe_id}},
        )
        return result.modified_count

    async def sync_mirror(
        self,
        recipe_id: str,
        kind: SocialKind,
        member_ids: list[str],
    ) -> int:
        """Make ``recipe_id`` appear in exactly the given users' mirror list.

        Returns:
            Number of user documents that had to change.
        """
        field = MIRROR_FIELDS[kind]
        member_keys = [to_document_id(u) for u in member_ids]

        added = 0
        if member_keys:
            result = await self.collection.update_many(
                {"_id": {"$in": member_keys}, field: {"$ne": recipe_id}},
                {"$addToSet": {field: recipe_id}},
            )
            added = result.modified_count

        result = await self.collection.update_many(
            {"_id": {"$nin": member_keys}, field: recipe_id},
            {"$pull": {field: recipe_id}},
        )
        return added + result.modified_count

    async def prune_missing_recipes(self, existing_ids: list[str]) -> int:
        """Drop mirrored ids of recipes that no longer exist."""
        total = 0
        for field in MIRROR_FIELDS.values():
            result = await self.collection.update_many(
                {field: {"$elemMatch": {"$nin": existing_ids}}},
                {"$pull": {field: {"$nin": existing_ids}}},
            )
            total += result.modified_count
        return total
