from fastapi import APIRouter
from app.api import activities, comments, dashboard, reports, tags, users, videos

api_router = APIRouter(prefix="/api")

api_router.include_router(users.users_router, prefix="/users", tags=["users"])
api_router.include_router(videos.videos_router, prefix="/videos", tags=["videos"])
api_router.include_router(comments.comments_router, prefix="/comments", tags=["comments"])
api_router.include_router(tags.tags_router, prefix="/tags", tags=["tags"])
api_router.include_router(dashboard.dashboard_router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(reports.reports_router, prefix="/reports", tags=["reports"])
api_router.include_router(activities.activities_router, prefix="/activities", tags=["activities"])

__all__ = ["api_router"]
