"""Admin endpoints for user administration and maintenance.

Provides:
- GET /admin/users, PATCH/DELETE /admin/users/{userId}
- POST /admin/maintenance/repair-counters for converging social counters
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.encoders import jsonable_encoder
from redis.exceptions import RedisError
from starlette.responses import JSONResponse, Response

from app.api.dependencies import get_repair_service, get_user_service
from app.api.errors import to_app_exception
from app.auth.dependencies import CurrentUser, RequireAdmin, RequirePermissions
from app.auth.permissions import Permission
from app.core.exceptions import ServiceUnavailableException
from app.observability.logging import get_logger
from app.schemas.admin import RepairQueuedResponse
from app.schemas.social import RepairReportResponse
from app.schemas.user import (
    AdminUserUpdateRequest,
    UserDeletedResponse,
    UserListResponse,
    UserResponse,
)
from app.services.exceptions import ServiceError
from app.services.social.repair import CounterRepairService  # noqa: TC001
from app.services.users.service import UserService  # noqa: TC001
from app.workers.jobs import enqueue_counter_repair, get_job_status


logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

UserId = Annotated[str, Path(alias="userId", min_length=1)]
AdminUser = Annotated[CurrentUser, Depends(RequirePermissions(Permission.ADMIN_USERS))]

_ADMIN_ERRORS = {
    401: {"description": "Authentication required"},
    403: {"description": "Insufficient permissions"},
}


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List users",
    responses=_ADMIN_ERRORS,
)
async def list_users(
    service: Annotated[UserService, Depends(get_user_service)],
    _admin: AdminUser,
) -> UserListResponse:
    return await service.list_users()


@router.patch(
    "/users/{userId}",
    response_model=UserResponse,
    summary="Activate, deactivate or change a user's role",
    responses={
        **_ADMIN_ERRORS,
        404: {"description": "User not found"},
    },
)
async def update_user(
    user_id: UserId,
    body: AdminUserUpdateRequest,
    service: Annotated[UserService, Depends(get_user_service)],
    admin: AdminUser,
) -> UserResponse:
    try:
        return await service.update_user(user_id, body, admin)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.delete(
    "/users/{userId}",
    response_model=UserDeletedResponse,
    summary="Delete a user",
    description="The admin account cannot be deleted.",
    responses={
        **_ADMIN_ERRORS,
        404: {"description": "User not found"},
    },
)
async def delete_user(
    user_id: UserId,
    service: Annotated[UserService, Depends(get_user_service)],
    admin: AdminUser,
) -> UserDeletedResponse:
    try:
        return await service.delete_user(user_id, admin)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.post(
    "/maintenance/repair-counters",
    response_model=RepairReportResponse,
    summary="Recompute social counters",
    description=(
        "Recomputes every recipe's likes, saves and comment counts from the "
        "stored sets and threads, and re-mirrors users' liked/saved lists. "
        "With background=true the run is handed to the worker instead."
    ),
    responses={
        **_ADMIN_ERRORS,
        202: {"model": RepairQueuedResponse, "description": "Queued for the worker"},
        503: {"description": "Job queue unavailable"},
    },
)
async def repair_counters(
    service: Annotated[CounterRepairService, Depends(get_repair_service)],
    admin: Annotated[CurrentUser, Depends(RequireAdmin)],
    background: Annotated[bool, Query()] = False,
) -> Response:
    if background:
        try:
            job_id = await enqueue_counter_repair()
        except RedisError:
            logger.exception("Failed to enqueue counter repair")
            raise ServiceUnavailableException("Job queue unavailable") from None
        body = RepairQueuedResponse(job_id=job_id)
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content=body.model_dump(mode="json"),
        )

    logger.info("Counter repair requested", admin_id=admin.id)
    report = await service.repair_counters()
    return JSONResponse(
        content=RepairReportResponse(**asdict(report)).model_dump(mode="json"),
    )


@router.get(
    "/maintenance/jobs/{jobId}",
    summary="Background job status",
    responses={**_ADMIN_ERRORS, 503: {"description": "Job queue unavailable"}},
)
async def get_maintenance_job(
    job_id: Annotated[str, Path(alias="jobId", min_length=1)],
    _admin: Annotated[CurrentUser, Depends(RequireAdmin)],
) -> Response:
    info = await get_job_status(job_id)
    if info is None:
        raise ServiceUnavailableException("Job queue unavailable")
    return JSONResponse(content=jsonable_encoder(info))
