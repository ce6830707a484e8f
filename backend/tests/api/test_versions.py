"""Tests for note version history endpoints."""
from datetime import datetime

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.api.conftest import FAKE_UUID, create_user2_client


async def _create_note(client: AsyncClient, **fields: object) -> dict:
    payload = {"title": "Groceries", "description": "milk", **fields}
    response = await client.post("/notes/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _versions(client: AsyncClient, note_id: str) -> list[dict]:
    response = await client.get(f"/notes/{note_id}/versions")
    assert response.status_code == 200, response.text
    return response.json()["items"]


async def test_list_versions_response_structure(client: AsyncClient) -> None:
    """The list carries the retention limit and full version content."""
    note = await _create_note(client, tag="home")

    response = await client.get(f"/notes/{note['id']}/versions")

    data = response.json()
    assert data["total"] == 1
    assert data["retention_limit"] == 10
    version = data["items"][0]
    assert version["note_id"] == note["id"]
    assert version["user_id"] == note["user_id"]
    assert version["tag"] == "home"
    assert version["comment"] == "Initial version"
    assert "saved_at" in version


async def test_list_versions_newest_first_and_pruned(client: AsyncClient) -> None:
    """Twelve edits leave the ten most recent "before" states."""
    note = await _create_note(client)
    for i in range(1, 13):
        response = await client.patch(f"/notes/{note['id']}", json={"description": f"v{i}"})
        assert response.status_code == 200

    current = (await client.get(f"/notes/{note['id']}")).json()
    versions = await _versions(client, note["id"])

    assert current["description"] == "v12"
    assert len(versions) == 10
    saved_at = [datetime.fromisoformat(v["saved_at"]) for v in versions]
    assert saved_at == sorted(saved_at, reverse=True)
    assert [v["description"] for v in versions] == [f"v{i}" for i in range(11, 1, -1)]
    assert {v["comment"] for v in versions} == {"Before update"}


async def test_get_version(client: AsyncClient) -> None:
    """A single version can be fetched by id."""
    note = await _create_note(client)
    [initial] = await _versions(client, note["id"])

    response = await client.get(f"/notes/{note['id']}/versions/{initial['id']}")

    assert response.status_code == 200
    assert response.json()["description"] == "milk"


async def test_get_version_not_found(client: AsyncClient) -> None:
    note = await _create_note(client)
    response = await client.get(f"/notes/{note['id']}/versions/{FAKE_UUID}")
    assert response.status_code == 404


async def test_list_versions_note_not_found(client: AsyncClient) -> None:
    response = await client.get(f"/notes/{FAKE_UUID}/versions")
    assert response.status_code == 404


async def test_restore_version(client: AsyncClient) -> None:
    """Restoring copies the version's content and backs up the current state."""
    note = await _create_note(
        client,
        attachments=[{"path": "/uploads/a.txt", "original_name": "a.txt"}],
    )
    [initial] = await _versions(client, note["id"])
    await client.patch(
        f"/notes/{note['id']}",
        json={"title": "Changed", "description": "eggs", "attachments": [], "is_pinned": True},
    )

    response = await client.post(f"/notes/{note['id']}/versions/{initial['id']}/restore")

    assert response.status_code == 200
    data = response.json()
    assert data["restored_version_id"] == initial["id"]
    restored = data["note"]
    assert restored["id"] == note["id"]
    assert restored["user_id"] == note["user_id"]
    assert restored["title"] == "Groceries"
    assert restored["description"] == "milk"
    assert restored["is_pinned"] is False
    assert restored["attachments"] == initial["attachments"]

    backup = (
        await client.get(f"/notes/{note['id']}/versions/{data['backup_version_id']}")
    ).json()
    assert backup["comment"] == "Backup before restore"
    assert backup["title"] == "Changed"
    assert backup["description"] == "eggs"
    assert backup["attachments"] == []


async def test_restore_version_from_other_note_is_rejected(client: AsyncClient) -> None:
    """A version of note B cannot be restored onto note A."""
    note_a = await _create_note(client, title="A")
    note_b = await _create_note(client, title="B")
    [version_b] = await _versions(client, note_b["id"])

    response = await client.post(f"/notes/{note_a['id']}/versions/{version_b['id']}/restore")

    assert response.status_code == 400
    assert (await client.get(f"/notes/{note_a['id']}")).json()["title"] == "A"
    assert len(await _versions(client, note_a["id"])) == 1
    assert len(await _versions(client, note_b["id"])) == 1


async def test_restore_unknown_version(client: AsyncClient) -> None:
    note = await _create_note(client)
    response = await client.post(f"/notes/{note['id']}/versions/{FAKE_UUID}/restore")
    assert response.status_code == 404


async def test_other_user_cannot_list_or_restore(
    client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    """A non-owner gets 403 from the history endpoints and nothing changes."""
    note = await _create_note(client)
    [initial] = await _versions(client, note["id"])
    await client.patch(f"/notes/{note['id']}", json={"description": "eggs"})

    async with create_user2_client(db_session, "auth|intruder", "intruder@test.com") as user2:
        listed = await user2.get(f"/notes/{note['id']}/versions")
        fetched = await user2.get(f"/notes/{note['id']}/versions/{initial['id']}")
        restored = await user2.post(f"/notes/{note['id']}/versions/{initial['id']}/restore")

    assert listed.status_code == 403
    assert fetched.status_code == 403
    assert restored.status_code == 403
    assert (await client.get(f"/notes/{note['id']}")).json()["description"] == "eggs"
    assert len(await _versions(client, note["id"])) == 2
