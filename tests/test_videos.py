from datetime import timedelta
from pathlib import Path
from uuid import UUID, uuid4

from sqlalchemy import select

from app.models.videos import Video
from app.utils.dates import utcnow
from tests.conftest import create_video

UPLOAD_FILE = {"video": ("My Clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")}


async def upload(client, headers, **data):
    form = {"title": "My Clip!", "description": "A clip", "duration": "12.5", **data}
    return await client.post("/api/videos/upload", files=UPLOAD_FILE, data=form, headers=headers)


async def test_upload_requires_token(client):
    response = await client.post("/api/videos/upload", files=UPLOAD_FILE, data={"title": "x"})

    assert response.status_code == 401


async def test_upload_stores_file_tags_and_thumbnail(client, user, user_headers, settings):
    response = await upload(client, user_headers, tags="music, travel,music")

    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == str(user.id)
    assert body["title"] == "My Clip!"
    assert body["size"] == len(UPLOAD_FILE["video"][1])
    assert body["mimetype"] == "video/mp4"
    assert body["status"] == "published"
    assert body["published_at"] is not None
    assert [tag["name"] for tag in body["tags"]] == ["music", "travel"]
    assert body["comments"] == []

    assert body["filename"].startswith("My_Clip_-")
    assert body["filename"].endswith(".mp4")
    assert Path(body["filepath"]).read_bytes() == UPLOAD_FILE["video"][1]
    assert body["thumbnail"].endswith(f"{body['id']}.png")
    assert Path(body["thumbnail"]).exists()


async def test_upload_reuses_existing_tags(client, user_headers):
    first = (await upload(client, user_headers, tags="music")).json()
    second = (await upload(client, user_headers, tags="music")).json()

    assert first["tags"][0]["id"] == second["tags"][0]["id"]


async def test_upload_thumbnail_failure_keeps_video(client, app, user_headers, db):
    app.state.thumbnailer.fail = True

    response = await upload(client, user_headers)

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to generate thumbnail"
    assert "ffmpeg" in body["details"]

    video = await db.get(Video, UUID(body["video_id"]))
    assert video is not None
    assert video.thumbnail is None


async def test_upload_scheduled_in_past_rejected(client, user_headers, db):
    past = (utcnow() - timedelta(days=1)).isoformat()

    response = await upload(client, user_headers, status="scheduled", scheduled_for=past)

    assert response.status_code == 400
    assert response.json() == {"message": "Scheduled date must be in the future"}
    assert (await db.execute(select(Video))).scalars().all() == []


async def test_upload_scheduled_in_future(client, user_headers):
    future = (utcnow() + timedelta(days=1)).isoformat()

    response = await upload(client, user_headers, status="scheduled", scheduled_for=future)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "scheduled"
    assert body["published_at"] is None


async def test_get_video_does_not_count_view(client, video):
    response = await client.get(f"/api/videos/{video.id}")

    assert response.status_code == 200
    assert response.json()["views"] == 0
    assert (await client.get(f"/api/videos/{video.id}")).json()["views"] == 0


async def test_get_unknown_video(client):
    response = await client.get(f"/api/videos/{uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"message": "Video not found"}


async def test_list_videos_paginates(client, sessionmaker, user):
    for i in range(3):
        await create_video(sessionmaker, user.id, title=f"v{i}")

    response = await client.get("/api/videos/", params={"page": 2, "limit": 2})

    body = response.json()
    assert body["total"] == 3
    assert body["page"] == 2
    assert body["pages"] == 2
    assert [video["title"] for video in body["videos"]] == ["v2"]


async def test_list_videos_rejects_bad_page(client):
    response = await client.get("/api/videos/", params={"page": 0})

    assert response.status_code == 400


async def test_search_by_title_and_tags(client, sessionmaker, user):
    await create_video(sessionmaker, user.id, title="Cooking pasta", tags=["food"])
    await create_video(sessionmaker, user.id, title="Mountain trip", tags=["travel"])
    await create_video(sessionmaker, user.id, title="Street food tour", tags=["city"])

    by_title = await client.get("/api/videos/search", params={"query": "FOOD"})
    assert [video["title"] for video in by_title.json()["videos"]] == ["Street food tour"]

    by_tag = await client.get("/api/videos/search", params={"tags": "travel,food"})
    assert [video["title"] for video in by_tag.json()["videos"]] == ["Cooking pasta", "Mountain trip"]


async def test_videos_by_tag(client, sessionmaker, user):
    await create_video(sessionmaker, user.id, title="a", tags=["music"])
    await create_video(sessionmaker, user.id, title="b")

    response = await client.get("/api/videos/tag/music")

    assert [video["title"] for video in response.json()["videos"]] == ["a"]


async def test_videos_by_user_and_mine(client, sessionmaker, user, user_headers):
    other = uuid4()
    await create_video(sessionmaker, user.id, title="mine")
    await create_video(sessionmaker, other, title="theirs")

    mine = await client.get("/api/videos/user/my-videos", headers=user_headers)
    assert [video["title"] for video in mine.json()["videos"]] == ["mine"]

    theirs = await client.get(f"/api/videos/user/{other}")
    assert [video["title"] for video in theirs.json()["videos"]] == ["theirs"]


async def test_update_video_requires_admin(client, video, user_headers):
    response = await client.put(f"/api/videos/{video.id}", json={"title": "x"}, headers=user_headers)

    assert response.status_code == 401
    assert response.json() == {"message": "You are not authorized to perform this action."}


async def test_update_video_replaces_tags(client, sessionmaker, user, admin_headers):
    video = await create_video(sessionmaker, user.id, tags=["old"])

    response = await client.put(
        f"/api/videos/{video.id}",
        json={"title": "Renamed", "tags": "new, fresh", "visibility": "private"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Renamed"
    assert body["visibility"] == "private"
    assert [tag["name"] for tag in body["tags"]] == ["fresh", "new"]


async def test_update_video_schedule_rules(client, video, admin_headers):
    past = (utcnow() - timedelta(hours=1)).isoformat()
    rejected = await client.put(
        f"/api/videos/{video.id}", json={"status": "scheduled", "scheduledFor": past}, headers=admin_headers
    )
    assert rejected.status_code == 400

    future = (utcnow() + timedelta(hours=1)).isoformat()
    scheduled = await client.put(
        f"/api/videos/{video.id}", json={"status": "scheduled", "scheduledFor": future}, headers=admin_headers
    )
    assert scheduled.json()["published_at"] is None

    published = await client.put(f"/api/videos/{video.id}", json={"status": "published"}, headers=admin_headers)
    assert published.json()["published_at"] is not None


async def test_delete_video_removes_file(client, app, sessionmaker, user, admin_headers, db):
    stored = app.state.storage.videos_dir / "clip.mp4"
    stored.write_bytes(b"data")
    video = await create_video(sessionmaker, user.id, filepath=str(stored))

    response = await client.delete(f"/api/videos/{video.id}", headers=admin_headers)

    assert response.status_code == 200
    assert not stored.exists()
    assert await db.get(Video, video.id) is None


async def test_delete_video_missing_file_reports_error(client, app, sessionmaker, user, admin_headers, db):
    missing = app.state.storage.videos_dir / "missing.mp4"
    video = await create_video(sessionmaker, user.id, filepath=str(missing))

    response = await client.delete(f"/api/videos/{video.id}", headers=admin_headers)

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to delete video file"
    assert await db.get(Video, video.id) is None
