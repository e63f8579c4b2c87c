"""
Tests for share links: issue, reuse, rotate, revoke, invite and anonymous access.
"""

import pytest

from conftest import PDF_BYTES


async def _share(client, headers, doc_id):
    response = await client.post(f"/documents/{doc_id}/share", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_share_assigns_token_and_reuses_it(client, owner_headers, document):
    first = await _share(client, owner_headers, document["uuid"])
    second = await _share(client, owner_headers, document["uuid"])

    assert first["share_token"]
    assert first["share_token"] == second["share_token"]
    assert first["share_url"] == f"http://testserver/shared/{first['share_token']}"
    assert first["share_token"] != document["uuid"]

    response = await client.get(f"/documents/{document['uuid']}", headers=owner_headers)
    assert response.json()["is_shared"] is True
    assert response.json()["share_url"] == first["share_url"]


@pytest.mark.asyncio
async def test_share_tokens_are_unique_per_document(client, owner_headers, document):
    from conftest import upload_pdf

    other = (await upload_pdf(client, owner_headers, "second.pdf")).json()

    first = await _share(client, owner_headers, document["uuid"])
    second = await _share(client, owner_headers, other["uuid"])

    assert first["share_token"] != second["share_token"]


@pytest.mark.asyncio
async def test_only_owner_can_share(client, other_headers, document):
    response = await client.post(f"/documents/{document['uuid']}/share", headers=other_headers)
    assert response.status_code == 404

    response = await client.post(f"/documents/{document['uuid']}/share")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_anonymous_reader_opens_shared_document(client, owner_headers, document):
    token = (await _share(client, owner_headers, document["uuid"]))["share_token"]

    response = await client.get(f"/shared/{token}")

    assert response.status_code == 200
    data = response.json()
    assert data["uuid"] == document["uuid"]
    assert data["name"] == "report.pdf"
    assert data["share_url"] is None

    pdf = await client.get(data["file_url"].replace("http://testserver", ""))
    assert pdf.status_code == 200
    assert pdf.content == PDF_BYTES


@pytest.mark.asyncio
async def test_share_token_header_grants_read_but_not_write(client, owner_headers, document):
    token = (await _share(client, owner_headers, document["uuid"]))["share_token"]
    headers = {"X-Share-Token": token}
    doc_id = document["uuid"]

    assert (await client.get(f"/documents/{doc_id}", headers=headers)).status_code == 200

    response = await client.patch(f"/documents/{doc_id}", headers=headers, json={"name": "hijack.pdf"})
    assert response.status_code == 404

    response = await client.delete(f"/documents/{doc_id}", headers=headers)
    assert response.status_code == 404

    owner_view = await client.get(f"/documents/{doc_id}", headers=owner_headers)
    assert owner_view.json()["name"] == "report.pdf"


@pytest.mark.asyncio
async def test_unshared_document_is_not_reachable_by_id_alone(client, document):
    response = await client.get(f"/documents/{document['uuid']}", headers={"X-Share-Token": document["uuid"]})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_token_returns_not_found(client):
    response = await client.get("/shared/not-a-real-token")

    assert response.status_code == 404
    assert response.json()["detail"] == "Document not found"


@pytest.mark.asyncio
async def test_rotate_invalidates_previous_link(client, owner_headers, document):
    old = (await _share(client, owner_headers, document["uuid"]))["share_token"]

    response = await client.post(f"/documents/{document['uuid']}/share/rotate", headers=owner_headers)

    assert response.status_code == 200
    new = response.json()["share_token"]
    assert new != old
    assert (await client.get(f"/shared/{old}")).status_code == 404
    assert (await client.get(f"/shared/{new}")).status_code == 200


@pytest.mark.asyncio
async def test_revoke_disables_link(client, owner_headers, document):
    token = (await _share(client, owner_headers, document["uuid"]))["share_token"]

    response = await client.delete(f"/documents/{document['uuid']}/share", headers=owner_headers)

    assert response.status_code == 204
    assert (await client.get(f"/shared/{token}")).status_code == 404
    owner_view = await client.get(f"/documents/{document['uuid']}", headers=owner_headers)
    assert owner_view.json()["is_shared"] is False


@pytest.mark.asyncio
async def test_invite_sends_share_link(client, owner_headers, document, notifier):
    response = await client.post(
        f"/documents/{document['uuid']}/share/invite",
        headers=owner_headers,
        json={"email": "friend@example.com"},
    )

    assert response.status_code == 200
    assert notifier.sent == [{
        "kind": "share_invite",
        "to": "friend@example.com",
        "link": response.json()["share_url"],
        "document": "report.pdf",
    }]
