from uuid import uuid4

from sqlalchemy import select

from app.models.activities import Activity
from app.models.comments import Comment
from app.models.reports import Report


def report_payload(content_type, content_id, reason="spam", **extra):
    return {"contentType": content_type, "contentId": str(content_id), "reason": reason, **extra}


async def test_anonymous_report_on_video(client, video, db):
    response = await client.post("/api/reports/", json=report_payload("Video", video.id, description="Spam links"))

    assert response.status_code == 201
    assert response.json() == {"message": "Video reported successfully"}
    report = (await db.execute(select(Report))).scalar_one()
    assert report.status == "pending"
    assert report.reporter_id is None
    assert report.description == "Spam links"


async def test_report_on_comment_logs_reporter_activity(client, sessionmaker, video, user, user_headers, app, db):
    async with sessionmaker() as session:
        comment = Comment(content="rude", user_id=user.id, video_id=video.id)
        session.add(comment)
        await session.commit()

    response = await client.post(
        "/api/reports/", json=report_payload("Comment", comment.id, reason="harassment"), headers=user_headers
    )

    assert response.status_code == 201
    assert response.json() == {"message": "Comment reported successfully"}
    assert await app.state.activity_logger.drain() == 1
    activity = (await db.execute(select(Activity))).scalar_one()
    assert activity.type == "report"
    assert activity.target_type == "Comment"
    assert activity.extra == {"reason": "harassment"}


async def test_report_missing_content(client):
    response = await client.post("/api/reports/", json=report_payload("Video", uuid4()))

    assert response.status_code == 404
    assert response.json() == {"message": "Video not found"}


async def test_report_rejects_unknown_reason(client, video):
    response = await client.post("/api/reports/", json=report_payload("Video", video.id, reason="boring"))

    assert response.status_code == 400


async def test_report_listing_requires_admin(client, user_headers):
    assert (await client.get("/api/reports/", headers=user_headers)).status_code == 401


async def test_report_listing_filters(client, sessionmaker, video, user, admin_headers):
    async with sessionmaker() as session:
        comment = Comment(content="rude", user_id=user.id, video_id=video.id)
        session.add(comment)
        await session.commit()
    await client.post("/api/reports/", json=report_payload("Video", video.id))
    await client.post("/api/reports/", json=report_payload("Comment", comment.id))

    everything = await client.get("/api/reports/", headers=admin_headers)
    assert everything.json()["total"] == 2
    assert [report["content_type"] for report in everything.json()["reports"]] == ["Comment", "Video"]

    comments = await client.get("/api/reports/", params={"contentType": "Comment"}, headers=admin_headers)
    assert comments.json()["total"] == 1
    assert comments.json()["reports"][0]["content_id"] == str(comment.id)

    resolved = await client.get("/api/reports/", params={"status": "resolved"}, headers=admin_headers)
    assert resolved.json()["total"] == 0


async def test_update_report_status(client, video, admin_headers):
    await client.post("/api/reports/", json=report_payload("Video", video.id))
    report = (await client.get("/api/reports/", headers=admin_headers)).json()["reports"][0]

    response = await client.patch(f"/api/reports/{report['id']}", json={"status": "resolved"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "resolved"
    filtered = await client.get("/api/reports/", params={"status": "resolved"}, headers=admin_headers)
    assert filtered.json()["total"] == 1


async def test_update_unknown_report(client, admin_headers):
    response = await client.patch(f"/api/reports/{uuid4()}", json={"status": "dismissed"}, headers=admin_headers)

    assert response.status_code == 404
    assert response.json() == {"message": "Report not found"}
