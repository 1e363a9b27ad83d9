"""Meal plan repository.

A plan is unique per ``(userId, date)`` (enforced by a unique index). Every
write touches a single slot field so concurrent edits of different slots
of the same day never overwrite each other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.database.connection import MEAL_PLANS, get_database
from app.database.documents import MealPlanDocument, RecipeSnapshot, to_document_id
from app.observability.logging import get_logger
from app.schemas.enums import MealType


if TYPE_CHECKING:
    from datetime import datetime

    from pymongo.asynchronous.collection import AsyncCollection
    from pymongo.asynchronous.database import AsyncDatabase

logger = get_logger(__name__)

_ALL_SLOTS_EMPTY = {str(meal_type): {"$in": [None, []]} for meal_type in MealType}


class MealPlanRepository:
    """Data access for the ``meal_plans`` collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._database = database

    @property
    def collection(self) -> AsyncCollection[dict[str, Any]]:
        database = self._database if self._database is not None else get_database()
        return database[MEAL_PLANS]

    async def get(self, user_id: str, date: str) -> MealPlanDocument | None:
        raw = await self.collection.find_one({"userId": user_id, "date": date})
        return MealPlanDocument.from_mongo(raw) if raw else None

    async def list_for_user(
        self,
        user_id: str,
        *,
        start: str | None = None,
        end: str | None = None,
    ) -> list[MealPlanDocument]:
        """Plans sorted by date; ``start``/``end`` are inclusive ISO dates."""
        query: dict[str, Any] = {"userId": user_id}
        date_range: dict[str, str] = {}
        if start:
            date_range["$gte"] = start
        if end:
            date_range["$lte"] = end
        if date_range:
            query["date"] = date_range

        cursor = self.collection.find(query).sort("date", ASCENDING)
        return [MealPlanDocument.from_mongo(raw) async for raw in cursor]

    async def push_meal(
        self,
        user_id: str,
        date: str,
        meal_type: MealType,
        recipe: RecipeSnapshot,
        now: datetime,
    ) -> MealPlanDocument:
        """Append a recipe to one slot, creating the day's plan if needed."""
        slot = str(meal_type)
        update = {
            "$push": {slot: recipe.to_mongo() | {"id": recipe.id}},
            "$set": {"updatedAt": now},
            "$setOnInsert": {
                "createdAt": now,
                **{str(other): [] for other in MealType if other != meal_type},
            },
        }
        try:
            raw = await self._upsert(user_id, date, update)
        except DuplicateKeyError:
            # Lost the race to create the day's plan; it exists now.
            logger.debug("Meal plan upsert raced, retrying", user_id=user_id, date=date)
            raw = await self._upsert(user_id, date, update)
        return MealPlanDocument.from_mongo(raw)

    async def _upsert(
        self,
        user_id: str,
        date: str,
        update: dict[str, Any],
    ) -> dict[str, Any]:
        return await self.collection.find_one_and_update(
            {"userId": user_id, "date": date},
            update,
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    async def set_slot(
        self,
        user_id: str,
        date: str,
        meal_type: MealType,
        recipes: list[RecipeSnapshot],
        now: datetime,
    ) -> MealPlanDocument | None:
        """Replace one slot; the other three are not touched."""
        raw = await self.collection.find_one_and_update(
            {"userId": user_id, "date": date},
            {
                "$set": {
                    str(meal_type): [r.to_mongo() | {"id": r.id} for r in recipes],
                    "updatedAt": now,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        return MealPlanDocument.from_mongo(raw) if raw else None

    async def remove_at(
        self,
        user_id: str,
        date: str,
        meal_type: MealType,
        index: int,
        now: datetime,
    ) -> MealPlanDocument | None:
        """Remove the entry at ``index`` of one slot.

        Returns ``None`` when there is no plan or no entry at that index.
        """
        slot = str(meal_type)
        field = f"${slot}"
        raw = await self.collection.find_one_and_update(
            {"userId": user_id, "date": date, f"{slot}.{index}": {"$exists": True}},
            [
                {
                    "$set": {
                        slot: {
                            "$map": {
                                "input": {
                                    "$filter": {
                                        "input": {"$range": [0, {"$size": field}]},
                                        "cond": {"$ne": ["$$this", index]},
                                    }
                                },
                                "in": {"$arrayElemAt": [field, "$$this"]},
                            }
                        },
                        "updatedAt": now,
                    }
                }
            ],
            return_document=ReturnDocument.AFTER,
        )
        return MealPlanDocument.from_mongo(raw) if raw else None

    async def delete_if_empty(self, plan_id: str) -> bool:
        """Delete a plan only while all four slots are still empty."""
        result = await self.collection.delete_one(
            {"_id": to_document_id(plan_id), **_ALL_SLOTS_EMPTY}
        )
        return result.deleted_count == 1

    async def delete(self, user_id: str, date: str) -> bool:
        result = await self.collection.delete_one({"userId": user_id, "date": date})
        return result.deleted_count == 1
