"""API v1 router aggregating all endpoint routers.

All endpoints are mounted under the ``api.v1_prefix`` setting.
"""

from __future__ import annotations

from fastapi import APIRouter

from app.api.v1.endpoints import (
    admin,
    comments,
    health,
    meal_plans,
    recipes,
    recommendations,
    shopping,
    social,
    users,
)


router = APIRouter()

router.include_router(health.router)
router.include_router(recipes.router)
router.include_router(social.router)
router.include_router(comments.router)
router.include_router(meal_plans.router)
router.include_router(shopping.router)
router.include_router(users.router)
router.include_router(recommendations.router)
router.include_router(admin.router)
