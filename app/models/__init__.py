from app.models.users import Users, UserRole
from app.models.tags import Tag, video_tags
from app.models.videos import Video, VideoStatus, Visibility
from app.models.comments import Comment, CommentStatus
from app.models.video_views import VideoView
from app.models.video_likes import VideoLike, ReactionType
from app.models.watch_history import WatchHistory
from app.models.saved_videos import SavedVideo
from app.models.activities import Activity, ActivityAction, ActivityType
from app.models.reports import Report, ReportReason, ReportStatus

__all__ = [
    "Activity",
    "ActivityAction",
    "ActivityType",
    "Comment",
    "CommentStatus",
    "ReactionType",
    "Report",
    "ReportReason",
    "ReportStatus",
    "SavedVideo",
    "Tag",
    "UserRole",
    "Users",
    "Video",
    "VideoLike",
    "VideoStatus",
    "VideoView",
    "Visibility",
    "WatchHistory",
    "video_tags",
]
