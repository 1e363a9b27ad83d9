"""Personalised recommendations."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_recommendation_service
from app.api.errors import to_app_exception
from app.auth.dependencies import CurrentUser, get_current_user
from app.schemas.recommendations import RecommendationsResponse
from app.services.exceptions import ServiceError
from app.services.recommendations.service import RecommendationService  # noqa: TC001


router = APIRouter(tags=["Recommendations"])


@router.get(
    "/recommendations",
    response_model=RecommendationsResponse,
    summary="Recipes ranked for my health profile",
    description=(
        "Ranks approved recipes with the external scorer using the caller's "
        "health profile. Rankings are cached per profile."
    ),
    responses={
        400: {"description": "Health profile not completed"},
        503: {"description": "Recommendation engine unavailable"},
    },
)
async def get_recommendations(
    service: Annotated[RecommendationService, Depends(get_recommendation_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> RecommendationsResponse:
    try:
        return await service.recommend(user, limit=limit)
    except ServiceError as e:
        raise to_app_exception(e) from None
