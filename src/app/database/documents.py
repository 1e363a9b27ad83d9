"""Stored document shapes.

Field names are camelCase in MongoDB and snake_case in Python. Unknown
fields are ignored on load, which is also how password hashes stay out of
``UserDocument``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Self

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.enums import MealType, RecipeStatus


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_id_list(value: Any) -> list[str]:
    if not value:
        return []
    return [str(v) for v in value]


Text = Annotated[str, BeforeValidator(_as_text)]
IdList = Annotated[list[str], BeforeValidator(_as_id_list)]


def to_document_id(value: str) -> ObjectId | str:
    """Map an API id to the stored ``_id``.

    Generated ids are ObjectIds; ids minted elsewhere (for example user ids
    coming from the identity gateway) are stored as plain strings.
    """
    if ObjectId.is_valid(value) and len(value) == 24:
        return ObjectId(value)
    return value


class Document(BaseModel):
    """Base for stored documents; ``id`` maps to ``_id``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
        use_enum_values=True,
        extra="ignore",
    )

    @classmethod
    def from_mongo(cls, raw: dict[str, Any]) -> Self:
        data = dict(raw)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    def to_mongo(self) -> dict[str, Any]:
        """Dump for writing; ``id`` is excluded so the store keeps ``_id``."""
        return self.model_dump(by_alias=True, exclude={"id"})


class Ingredient(Document):
    """One ingredient line. ``amount`` is free text such as ``"200"`` or ``"1/2"``."""

    name: str
    amount: Text = ""
    unit: Text = ""


class RecipeSnapshot(Document):
    """Recipe content, as embedded in meal plans."""

    id: str
    name: str
    description: Text = ""
    image: Text = ""
    category: str | None = None
    cuisine: str | None = None
    prep_time: int = 0
    cook_time: int = 0
    servings: int = 1
    difficulty: str | None = None
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    health_tags: list[str] = Field(default_factory=list)
    suitable_for: list[str] = Field(default_factory=list)
    not_suitable_for: list[str] = Field(default_factory=list)
    nutrition: dict[str, float] | None = None


class RecipeDocument(RecipeSnapshot):
    """A stored recipe with its moderation and social state."""

    status: RecipeStatus | None = None
    author_id: str | None = None
    author_email: str | None = None
    liked_by: IdList = Field(default_factory=list)
    saved_by: IdList = Field(default_factory=list)
    likes_count: int = 0
    saves_count: int = 0
    comments_count: int = 0
    reviewed_at: datetime | None = None
    review_note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def effective_status(self) -> RecipeStatus:
        return self.status or RecipeStatus.APPROVED

    def snapshot(self) -> RecipeSnapshot:
        return RecipeSnapshot.model_validate(
            self.model_dump(include=set(RecipeSnapshot.model_fields))
        )


class CommentDocument(Document):
    """A comment or a reply (``parent_id`` set)."""

    id: str
    recipe_id: str
    user_id: str
    user_name: Text = ""
    user_email: Text = ""
    content: str
    parent_id: str | None = None
    likes: IdList = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def is_reply(self) -> bool:
        return bool(self.parent_id)


class UserDocument(Document):
    """Account profile plus the mirrored liked/saved recipe ids."""

    id: str
    email: Text = ""
    name: Text = ""
    role: str = "user"
    is_active: bool = True
    created_at: datetime | None = None
    last_login: datetime | None = None
    age: int | None = None
    health_conditions: list[str] = Field(default_factory=list)
    dietary_preferences: list[str] = Field(default_factory=list)
    has_completed_health_profile: bool = False
    liked_recipes: IdList = Field(default_factory=list)
    saved_recipes: IdList = Field(default_factory=list)


class MealPlanDocument(Document):
    """The plan of one user for one calendar date (``YYYY-MM-DD``)."""

    id: str
    user_id: str
    date: str
    breakfast: list[RecipeSnapshot] = Field(default_factory=list)
    lunch: list[RecipeSnapshot] = Field(default_factory=list)
    dinner: list[RecipeSnapshot] = Field(default_factory=list)
    snack: list[RecipeSnapshot] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def slot(self, meal_type: MealType) -> list[RecipeSnapshot]:
        return getattr(self, str(meal_type))

    @property
    def is_empty(self) -> bool:
        return not any(self.slot(meal_type) for meal_type in MealType)


class MealInfo(Document):
    """Provenance of one ingredient occurrence."""

    date: str
    meal_type: MealType
    recipe_name: str


class ShoppingItem(Document):
    """One line of a shopping list, identified by its lower-cased ingredient."""

    ingredient: str
    amount: Text = ""
    unit: Text = ""
    checked: bool = False
    recipe_names: list[str] = Field(default_factory=list)
    meal_info: list[MealInfo] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return ingredient_key(self.ingredient)


def ingredient_key(name: str) -> str:
    """Case-insensitive identity of an ingredient within one list."""
    return name.strip().lower()


class ShoppingListDocument(Document):
    """A user's persisted shopping list."""

    id: str
    user_id: str
    items: list[ShoppingItem] = Field(default_factory=list)
    updated_at: datetime | None = None
