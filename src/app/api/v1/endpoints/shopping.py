"""Shopping list endpoints.

Items are addressed by key, the lower-cased ingredient name.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.api.dependencies import get_shopping_service
from app.api.errors import to_app_exception
from app.auth.dependencies import CurrentUser, RequirePermissions, get_current_user
from app.auth.permissions import Permission
from app.schemas.shopping import (
    GenerateShoppingListRequest,
    GenerateShoppingListResponse,
    GroupedShoppingListResponse,
    ReplaceShoppingListRequest,
    ShoppingListResponse,
)
from app.services.exceptions import ServiceError
from app.services.shopping.service import ShoppingService  # noqa: TC001


router = APIRouter(prefix="/shopping-list", tags=["Shopping List"])

ItemKey = Annotated[str, Path(min_length=1, description="Ingredient name, any case")]
Writer = Annotated[
    CurrentUser, Depends(RequirePermissions(Permission.SHOPPING_LIST_WRITE))
]

_CONFLICT = {409: {"description": "Concurrent edits kept colliding; retry"}}


@router.get("", response_model=ShoppingListResponse, summary="Get my shopping list")
async def get_shopping_list(
    service: Annotated[ShoppingService, Depends(get_shopping_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ShoppingListResponse:
    try:
        return await service.get(user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.get(
    "/grouped",
    response_model=GroupedShoppingListResponse,
    summary="Shopping list grouped by date and meal",
    description=(
        "Items appear under every date and meal they were generated for. "
        "Items added by hand are listed as ungrouped."
    ),
)
async def get_grouped_shopping_list(
    service: Annotated[ShoppingService, Depends(get_shopping_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> GroupedShoppingListResponse:
    try:
        return await service.grouped(user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.put(
    "",
    response_model=ShoppingListResponse,
    summary="Replace my shopping list",
    description="Items with the same key are collapsed; the first one wins.",
)
async def replace_shopping_list(
    body: ReplaceShoppingListRequest,
    service: Annotated[ShoppingService, Depends(get_shopping_service)],
    user: Writer,
) -> ShoppingListResponse:
    try:
        return await service.replace_all(user, body.items)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.delete("", response_model=ShoppingListResponse, summary="Clear my shopping list")
async def clear_shopping_list(
    service: Annotated[ShoppingService, Depends(get_shopping_service)],
    user: Writer,
) -> ShoppingListResponse:
    try:
        return await service.clear(user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.post(
    "/generate",
    response_model=GenerateShoppingListResponse,
    summary="Generate items from a day's meal plan",
    description=(
        "Aggregates the ingredients of every recipe planned for the date and "
        "merges them into the list. Items already on the list are kept as they are."
    ),
    responses={404: {"description": "No meal plan for this date"}, **_CONFLICT},
)
async def generate_shopping_list(
    body: GenerateShoppingListRequest,
    service: Annotated[ShoppingService, Depends(get_shopping_service)],
    user: Writer,
) -> GenerateShoppingListResponse:
    try:
        return await service.generate(user, body.date)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.post(
    "/items/{key}/toggle",
    response_model=ShoppingListResponse,
    summary="Check or uncheck an item",
    responses={404: {"description": "Item not found"}, **_CONFLICT},
)
async def toggle_item(
    key: ItemKey,
    service: Annotated[ShoppingService, Depends(get_shopping_service)],
    user: Writer,
) -> ShoppingListResponse:
    try:
        return await service.toggle_checked(user, key)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.delete(
    "/items/{key}",
    response_model=ShoppingListResponse,
    summary="Remove an item",
    responses={404: {"description": "Item not found"}, **_CONFLICT},
)
async def remove_item(
    key: ItemKey,
    service: Annotated[ShoppingService, Depends(get_shopping_service)],
    user: Writer,
) -> ShoppingListResponse:
    try:
        return await service.remove(user, key)
    except ServiceError as e:
        raise to_app_exception(e) from None
