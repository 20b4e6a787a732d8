import os
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from loguru import logger

CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredFile:
    filename: str
    path: str
    size: int
    mimetype: str


def sanitize_title(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", title)


class VideoStorage:
    """Local disk layout: ``<root>/videos`` for uploads, ``<root>/thumbnails`` for stills."""

    def __init__(self, upload_dir: str):
        self.root = Path(upload_dir)
        self.videos_dir = self.root / "videos"
        self.thumbnails_dir = self.root / "thumbnails"
        self.videos_dir.mkdir(parents=True, exist_ok=True)
        self.thumbnails_dir.mkdir(parents=True, exist_ok=True)

    def build_filename(self, title: str, original_filename: Optional[str]) -> str:
        extension = Path(original_filename or "").suffix
        return f"{sanitize_title(title)}-{uuid.uuid4()}{extension}"

    def thumbnail_path(self, video_id: uuid.UUID) -> Path:
        return self.thumbnails_dir / f"{video_id}.png"

    async def save(self, upload: UploadFile, title: str) -> StoredFile:
        filename = self.build_filename(title, upload.filename)
        file_path = self.videos_dir / filename

        size = 0
        with open(file_path, "wb") as f:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                f.write(chunk)
                size += len(chunk)

        logger.info(f"Stored upload {upload.filename} as {file_path} ({size} bytes)")
        return StoredFile(
            filename=filename,
            path=str(file_path),
            size=size,
            mimetype=upload.content_type or "application/octet-stream",
        )

    def remove(self, path: str) -> None:
        os.remove(path)
        logger.info(f"Removed file {path}")
