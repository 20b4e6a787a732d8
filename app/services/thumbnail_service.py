import asyncio
from pathlib import Path
from uuid import UUID

from loguru import logger

from app.services.storage_service import VideoStorage


class ThumbnailError(Exception):
    pass


class ThumbnailService:
    """Grabs one frame of a stored video with ffmpeg and writes it as PNG."""

    def __init__(self, storage: VideoStorage, ffmpeg_path: str = "ffmpeg", offset: str = "00:00:01"):
        self.storage = storage
        self.ffmpeg_path = ffmpeg_path
        self.offset = offset

    async def generate(self, video_path: str, video_id: UUID) -> str:
        output = self.storage.thumbnail_path(video_id)
        cmd = [
            self.ffmpeg_path,
            "-y",
            "-ss", self.offset,
            "-i", video_path,
            "-frames:v", "1",
            str(output),
        ]

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ThumbnailError(f"Could not start ffmpeg: {e}")

        _, stderr = await process.communicate()
        if process.returncode != 0 or not Path(output).exists():
            message = stderr.decode(errors="replace").strip().splitlines()[-1:] or ["unknown error"]
            raise ThumbnailError(f"ffmpeg exited with {process.returncode}: {message[0]}")

        logger.info(f"Generated thumbnail {output} for video {video_id}")
        return str(output)
