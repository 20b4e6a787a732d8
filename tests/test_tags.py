from uuid import uuid4

from sqlalchemy import select

from app.models.tags import Tag


async def test_create_tag_twice(client):
    first = await client.post("/api/tags/", json={"name": "music"})
    second = await client.post("/api/tags/", json={"name": "music"})

    assert first.status_code == 201
    assert first.json()["name"] == "music"
    assert second.status_code == 400
    assert second.json() == {"message": "Tag already exists"}


async def test_search_tags_substring_case_insensitive(client):
    for name in ["tag1", "tag2", "another-twag"]:
        await client.post("/api/tags/", json={"name": name})

    response = await client.get("/api/tags/search", params={"query": "TAG"})

    assert response.status_code == 200
    assert [tag["name"] for tag in response.json()] == ["tag1", "tag2"]


async def test_search_tags_requires_query(client):
    response = await client.get("/api/tags/search")

    assert response.status_code == 400
    assert response.json() == {"message": "Query parameter is required"}


async def test_search_tags_treats_wildcards_literally(client):
    await client.post("/api/tags/", json={"name": "100%"})
    await client.post("/api/tags/", json={"name": "1000"})

    response = await client.get("/api/tags/search", params={"query": "0%"})

    assert [tag["name"] for tag in response.json()] == ["100%"]


async def test_bulk_insert_skips_existing(client, db):
    await client.post("/api/tags/", json={"name": "music"})

    response = await client.post("/api/tags/bulk", json={"tags": "music, travel,  food ,travel"})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Tags added successfully"
    assert [tag["name"] for tag in body["new_tags"]] == ["travel", "food"]

    names = (await db.execute(select(Tag.name).order_by(Tag.name))).scalars().all()
    assert names == ["food", "music", "travel"]


async def test_list_tags_ordered_by_name(client):
    for name in ["zeta", "alpha", "mid"]:
        await client.post("/api/tags/", json={"name": name})

    response = await client.get("/api/tags/")

    assert [tag["name"] for tag in response.json()] == ["alpha", "mid", "zeta"]


async def test_get_update_delete_tag(client):
    tag = (await client.post("/api/tags/", json={"name": "old"})).json()

    assert (await client.get(f"/api/tags/{tag['id']}")).json()["name"] == "old"

    renamed = await client.put(f"/api/tags/{tag['id']}", json={"name": "new"})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "new"

    deleted = await client.delete(f"/api/tags/{tag['id']}")
    assert deleted.status_code == 200
    assert (await client.get(f"/api/tags/{tag['id']}")).status_code == 404


async def test_rename_to_existing_name_conflicts(client):
    await client.post("/api/tags/", json={"name": "taken"})
    tag = (await client.post("/api/tags/", json={"name": "free"})).json()

    response = await client.put(f"/api/tags/{tag['id']}", json={"name": "taken"})

    assert response.status_code == 400
    assert response.json() == {"message": "Tag already exists"}


async def test_unknown_tag_is_404(client):
    response = await client.get(f"/api/tags/{uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"message": "Tag not found"}


async def test_malformed_tag_id_is_400(client):
    response = await client.get("/api/tags/not-a-uuid")

    assert response.status_code == 400
