from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.api import deps
from readyforms.core.admin.service import AdminService
from readyforms.core.responses.service import FormResponseService
from readyforms.core.templates.service import TemplateService
from readyforms.db.models.user import User
from readyforms.schemas.admin import ActivityList, AdminStats
from readyforms.schemas.common import VersionedRequest
from readyforms.schemas.response import FormResponseDetail, FormResponsesList
from readyforms.schemas.template import TemplateDetail, TemplatesList
from readyforms.schemas.user import User as UserSchema
from readyforms.schemas.user import UserActionResponse, UsersCount, UsersList

router = APIRouter(prefix="/admin")


@router.get("/users", response_model=UsersList)
async def admin_list_users(
    pagination: deps.Pagination = Depends(deps.get_pagination),
    _admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    items, total = await AdminService(db).list_users(page=pagination.page, limit=pagination.limit)
    return UsersList(items=items, total=total)


@router.get("/users/{id}", response_model=UserSchema)
async def admin_get_user(
    id: UUID,
    _admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    return await AdminService(db).get_user(id)


@router.put("/users/{id}/block", response_model=UserActionResponse)
async def admin_toggle_block(
    id: UUID,
    data: VersionedRequest,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    user = await AdminService(db).toggle_block(id, admin, data.version)
    return UserActionResponse(message="User blocked" if user.blocked else "User unblocked", user=user)


@router.put("/users/{id}/admin", response_model=UserActionResponse)
async def admin_toggle_admin(
    id: UUID,
    data: VersionedRequest,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    user = await AdminService(db).toggle_admin(id, admin, data.version)
    return UserActionResponse(
        message="Admin rights granted" if user.is_admin else "Admin rights revoked",
        user=user,
    )


@router.get("/users-count", response_model=UsersCount)
async def admin_users_count(
    _admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    return await AdminService(db).users_count()


@router.get("/dashboard-stats", response_model=AdminStats)
async def admin_dashboard_stats(
    _admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    return await AdminService(db).stats()


@router.get("/system-activity", response_model=ActivityList)
async def admin_system_activity(
    limit: int = Query(20, ge=1, le=100),
    _admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    return ActivityList(items=await AdminService(db).system_activity(limit=limit))


@router.get("/templates", response_model=TemplatesList)
async def admin_list_templates(
    pagination: deps.Pagination = Depends(deps.get_pagination),
    _admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TemplateService(db)
    items, total = await service.list_templates(public_only=False, page=pagination.page, limit=pagination.limit)
    return TemplatesList(items=await service.to_details(items), total=total, page=pagination.page, limit=pagination.limit)


@router.get("/templates/{id}", response_model=TemplateDetail)
async def admin_get_template(
    id: UUID,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    return await TemplateService(db).get_for_viewer(id, admin)


@router.get("/responses", response_model=FormResponsesList)
async def admin_list_responses(
    pagination: deps.Pagination = Depends(deps.get_pagination),
    _admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    items = await FormResponseService(db).list_all(
        limit=pagination.limit, offset=(pagination.page - 1) * pagination.limit
    )
    return FormResponsesList(items=items)


@router.get("/responses/{id}", response_model=FormResponseDetail)
async def admin_get_response(
    id: UUID,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    return await FormResponseService(db).get(id, admin)
