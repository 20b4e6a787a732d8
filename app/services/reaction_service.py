from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, ConflictError
from app.models.activities import ActivityAction, ActivityType
from app.models.targets import TargetKind
from app.models.video_likes import ReactionType, VideoLike
from app.models.videos import Video
from app.schemas.video import ReactionResponse
from app.services.activity_service import ActivityLogger
from app.services.video_service import VideoService

MESSAGES = {
    ReactionType.LIKE: ("Video liked", "Like removed", "You have not liked this video"),
    ReactionType.DISLIKE: ("Video disliked", "Dislike removed", "You have not disliked this video"),
}

ACTIONS = {
    ReactionType.LIKE: ActivityAction.LIKE,
    ReactionType.DISLIKE: ActivityAction.DISLIKE,
}


@dataclass(frozen=True)
class Identity:
    """Who is reacting: the signed in user when known, otherwise a device fingerprint."""

    device_id: str
    ip_address: str
    user_id: Optional[UUID] = None


class ReactionService:
    def __init__(self, db: AsyncSession, activity: Optional[ActivityLogger] = None):
        self.db = db
        self.activity = activity
        self.videos = VideoService(db)

    async def react(self, video_id: UUID, identity: Identity, reaction: ReactionType) -> ReactionResponse:
        """Toggle ``reaction`` for ``identity``.

        Repeating the same reaction removes it, the opposite reaction flips the
        existing record. Counter changes are committed with the record change.
        """
        await self.videos.ensure_exists(video_id)
        added, removed, _ = MESSAGES[reaction]

        existing = await self._find(video_id, identity)
        deltas = {ReactionType.LIKE: 0, ReactionType.DISLIKE: 0}
        if existing is None:
            self.db.add(
                VideoLike(
                    video_id=video_id,
                    user_id=identity.user_id,
                    device_id=identity.device_id,
                    ip_address=identity.ip_address,
                    type=reaction.value,
                )
            )
            deltas[reaction] += 1
            state, message = reaction, added
        elif existing.type == reaction.value:
            await self.db.delete(existing)
            deltas[reaction] -= 1
            state, message = None, removed
        else:
            deltas[ReactionType(existing.type)] -= 1
            deltas[reaction] += 1
            existing.type = reaction.value
            if identity.user_id is not None and existing.user_id is None:
                existing.user_id = identity.user_id
            state, message = reaction, added

        likes, dislikes = await self._commit(video_id, deltas)
        logger.debug(f"Reaction {reaction.value} on {video_id}: {message}")
        self._log(identity, reaction, video_id, removed=state is None)
        return ReactionResponse(message=message, likes=likes, dislikes=dislikes, reaction=state)

    async def withdraw(self, video_id: UUID, identity: Identity, reaction: ReactionType) -> ReactionResponse:
        await self.videos.ensure_exists(video_id)
        _, removed, missing = MESSAGES[reaction]

        existing = await self._find(video_id, identity)
        if existing is None or existing.type != reaction.value:
            raise BadRequestError(missing)

        await self.db.delete(existing)
        deltas = {ReactionType.LIKE: 0, ReactionType.DISLIKE: 0}
        deltas[reaction] -= 1

        likes, dislikes = await self._commit(video_id, deltas)
        self._log(identity, reaction, video_id, removed=True)
        return ReactionResponse(message=removed, likes=likes, dislikes=dislikes, reaction=None)

    async def _find(self, video_id: UUID, identity: Identity) -> Optional[VideoLike]:
        if identity.user_id is not None:
            result = await self.db.execute(
                select(VideoLike).where(
                    VideoLike.video_id == video_id,
                    VideoLike.user_id == identity.user_id,
                )
            )
            existing = result.scalars().first()
            if existing is not None:
                return existing

        result = await self.db.execute(
            select(VideoLike).where(
                VideoLike.video_id == video_id,
                VideoLike.device_id == identity.device_id,
                VideoLike.ip_address == identity.ip_address,
            )
        )
        return result.scalar_one_or_none()

    async def _commit(self, video_id: UUID, deltas: Dict[ReactionType, int]) -> Tuple[int, int]:
        await self.db.execute(
            update(Video)
            .where(Video.id == video_id)
            .values(
                likes=Video.likes + deltas[ReactionType.LIKE],
                dislikes=Video.dislikes + deltas[ReactionType.DISLIKE],
            )
        )
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("A reaction from this device is already recorded")

        result = await self.db.execute(select(Video.likes, Video.dislikes).where(Video.id == video_id))
        likes, dislikes = result.one()
        return likes, dislikes

    def _log(self, identity: Identity, reaction: ReactionType, video_id: UUID, removed: bool) -> None:
        if self.activity and identity.user_id is not None:
            self.activity.log(
                identity.user_id,
                ActivityType.LIKE,
                ACTIONS[reaction],
                video_id,
                TargetKind.VIDEO,
                {"removed": removed},
            )
