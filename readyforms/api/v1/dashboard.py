from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.api import deps
from readyforms.core.dashboard.service import RECENT_LIMIT, DashboardService
from readyforms.core.templates.service import TemplateService
from readyforms.db.models.user import User
from readyforms.schemas.dashboard import DashboardStats, RecentActivity
from readyforms.schemas.response import FormResponsesList
from readyforms.schemas.template import TemplatesList

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = DashboardService(db)
    return await service.stats(current_user.id)


@router.get("/recent", response_model=RecentActivity)
async def dashboard_recent(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = DashboardService(db)
    return RecentActivity(
        recent_templates=await service.templates(current_user.id, limit=RECENT_LIMIT),
        recent_responses=await service.received_responses(current_user.id, limit=RECENT_LIMIT),
        recent_submissions=await service.submitted_responses(current_user.id, limit=RECENT_LIMIT),
    )


@router.get("/templates", response_model=TemplatesList)
async def dashboard_templates(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    templates = await DashboardService(db).templates(current_user.id)
    items = await TemplateService(db).to_details(templates)
    return TemplatesList(items=items, total=len(items), page=1, limit=max(1, len(items)))


@router.get("/responses", response_model=FormResponsesList)
async def dashboard_responses(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = DashboardService(db)
    return FormResponsesList(items=await service.received_responses(current_user.id))
