# letteros/routes/dashboard.py
from fastapi import APIRouter, Depends
from letteros.auth.dependencies import get_current_user
from letteros.auth.models import SessionUser
from letteros.models.newsletter import DashboardStats
from letteros.services.launch_content_service import launch_content_service
from letteros.services.newsletter_service import newsletter_service

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])

@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(user: SessionUser = Depends(get_current_user)):
    """Counts shown on the dashboard home"""
    launch_content_count = await launch_content_service.count_for_user(user.id)
    return await newsletter_service.get_dashboard_stats(user.id, launch_content_count)
