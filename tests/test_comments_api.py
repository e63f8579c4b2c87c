"""
Tests for comments: formatting, guest authorship, enrichment and access.
"""

import pytest


async def _share_token(client, headers, doc_id):
    response = await client.post(f"/documents/{doc_id}/share", headers=headers)
    return response.json()["share_token"]


@pytest.mark.asyncio
async def test_owner_comment_shows_display_name(client, owner_headers, document):
    response = await client.post(
        f"/documents/{document['uuid']}/comments",
        headers=owner_headers,
        json={"body": "  Looks **good**  "},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["body"] == "Looks <strong>good</strong>"
    assert data["author_name"] == "Olga"
    assert data["author_id"] is not None


@pytest.mark.asyncio
async def test_anonymous_comment_on_shared_document(client, owner_headers, document):
    token = await _share_token(client, owner_headers, document["uuid"])

    response = await client.post(f"/shared/{token}/comments", json={"body": "**hello**"})

    assert response.status_code == 201
    data = response.json()
    assert data["body"] == "<strong>hello</strong>"
    assert data["author_id"] is None
    assert data["author_name"] == "Guest"

    listing = await client.get(f"/shared/{token}/comments")
    assert [c["body"] for c in listing.json()["comments"]] == ["<strong>hello</strong>"]


@pytest.mark.asyncio
async def test_comments_listed_in_creation_order(client, owner_headers, document):
    doc_id = document["uuid"]
    for body in ("one", "two", "three"):
        await client.post(f"/documents/{doc_id}/comments", headers=owner_headers, json={"body": body})

    response = await client.get(f"/documents/{doc_id}/comments", headers=owner_headers)

    assert response.status_code == 200
    assert [c["body"] for c in response.json()["comments"]] == ["one", "two", "three"]
    assert response.json()["total"] == 3


@pytest.mark.asyncio
async def test_renamed_profile_applies_to_old_comments(client, owner_headers, document):
    doc_id = document["uuid"]
    await client.post(f"/documents/{doc_id}/comments", headers=owner_headers, json={"body": "before"})

    response = await client.put("/profiles/me", headers=owner_headers, json={"display_name": "Olga K."})
    assert response.status_code == 200

    listing = await client.get(f"/documents/{doc_id}/comments", headers=owner_headers)
    assert listing.json()["comments"][0]["author_name"] == "Olga K."


@pytest.mark.asyncio
async def test_empty_comment_rejected(client, owner_headers, document):
    doc_id = document["uuid"]

    for body in ("   ", "<b></b><script>alert(1)</script>", "<p> </p>"):
        response = await client.post(f"/documents/{doc_id}/comments", headers=owner_headers, json={"body": body})
        assert response.status_code == 400, body

    listing = await client.get(f"/documents/{doc_id}/comments", headers=owner_headers)
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_disallowed_markup_is_stripped(client, owner_headers, document):
    response = await client.post(
        f"/documents/{document['uuid']}/comments",
        headers=owner_headers,
        json={"body": '<em onclick="x()">hi</em><script>alert(1)</script><a href="http://e">link</a>'},
    )

    assert response.status_code == 201
    assert response.json()["body"] == "<em>hi</em>link"


@pytest.mark.asyncio
async def test_stranger_cannot_read_or_write_comments(client, owner_headers, other_headers, document):
    doc_id = document["uuid"]
    await client.post(f"/documents/{doc_id}/comments", headers=owner_headers, json={"body": "private"})

    assert (await client.get(f"/documents/{doc_id}/comments", headers=other_headers)).status_code == 404
    assert (await client.get(f"/documents/{doc_id}/comments")).status_code == 404

    response = await client.post(f"/documents/{doc_id}/comments", headers=other_headers, json={"body": "hi"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_signed_in_visitor_with_token_comments_under_own_name(client, owner_headers, other_headers, document):
    token = await _share_token(client, owner_headers, document["uuid"])

    response = await client.post(f"/shared/{token}/comments", headers=other_headers, json={"body": "hi"})

    assert response.status_code == 201
    assert response.json()["author_name"] == "Boris"


@pytest.mark.asyncio
async def test_revoked_link_stops_comment_access(client, owner_headers, document):
    doc_id = document["uuid"]
    token = await _share_token(client, owner_headers, doc_id)
    await client.delete(f"/documents/{doc_id}/share", headers=owner_headers)

    headers = {"X-Share-Token": token}
    assert (await client.get(f"/documents/{doc_id}/comments", headers=headers)).status_code == 404
    response = await client.post(f"/documents/{doc_id}/comments", headers=headers, json={"body": "late"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invalid_bearer_is_rejected_not_downgraded(client, owner_headers, document):
    token = await _share_token(client, owner_headers, document["uuid"])

    response = await client.get(
        f"/shared/{token}/comments",
        headers={"Authorization": "Bearer garbage"},
    )

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def _guest_comment_setup(client, owner_headers, other_headers, document):
    doc_id = document["uuid"]
    token = await _share_token(client, owner_headers, doc_id)
    response = await client.post(f"/shared/{token}/comments", headers=other_headers, json={"body": "first"})
    return doc_id, token, response.json()["uuid"]


@pytest.mark.asyncio
async def test_author_edits_own_comment(client, owner_headers, other_headers, document):
    doc_id, token, comment_id = await _guest_comment_setup(client, owner_headers, other_headers, document)
    created = (await client.get(f"/shared/{token}/comments")).json()["comments"][0]

    response = await client.patch(
        f"/documents/{doc_id}/comments/{comment_id}",
        headers={**other_headers, "X-Share-Token": token},
        json={"body": "**second**<script>x()</script>"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["body"] == "<strong>second</strong>"
    assert data["author_name"] == "Boris"
    assert data["created_at"] == created["created_at"]

    listing = await client.get(f"/shared/{token}/comments")
    assert [c["body"] for c in listing.json()["comments"]] == ["<strong>second</strong>"]


@pytest.mark.asyncio
async def test_edit_to_empty_body_rejected(client, owner_headers, document):
    doc_id = document["uuid"]
    created = await client.post(f"/documents/{doc_id}/comments", headers=owner_headers, json={"body": "keep"})

    response = await client.patch(
        f"/documents/{doc_id}/comments/{created.json()['uuid']}",
        headers=owner_headers,
        json={"body": "<p> </p>"},
    )

    assert response.status_code == 400
    listing = await client.get(f"/documents/{doc_id}/comments", headers=owner_headers)
    assert listing.json()["comments"][0]["body"] == "keep"


@pytest.mark.asyncio
async def test_author_deletes_own_comment(client, owner_headers, document):
    doc_id = document["uuid"]
    created = await client.post(f"/documents/{doc_id}/comments", headers=owner_headers, json={"body": "oops"})

    response = await client.delete(f"/documents/{doc_id}/comments/{created.json()['uuid']}", headers=owner_headers)

    assert response.status_code == 204
    listing = await client.get(f"/documents/{doc_id}/comments", headers=owner_headers)
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_only_author_may_edit_or_delete_comment(client, owner_headers, other_headers, document):
    doc_id, token, comment_id = await _guest_comment_setup(client, owner_headers, other_headers, document)
    url = f"/documents/{doc_id}/comments/{comment_id}"

    for headers in (owner_headers, {"X-Share-Token": token}, other_headers):
        assert (await client.patch(url, headers=headers, json={"body": "hijack"})).status_code == 404
        assert (await client.delete(url, headers=headers)).status_code == 404

    listing = await client.get(f"/shared/{token}/comments")
    assert [c["body"] for c in listing.json()["comments"]] == ["first"]


@pytest.mark.asyncio
async def test_guest_comment_cannot_be_edited(client, owner_headers, document):
    doc_id = document["uuid"]
    token = await _share_token(client, owner_headers, doc_id)
    created = await client.post(f"/shared/{token}/comments", json={"body": "anonymous"})
    url = f"/documents/{doc_id}/comments/{created.json()['uuid']}"

    assert (await client.patch(url, headers={"X-Share-Token": token}, json={"body": "changed"})).status_code == 404
    assert (await client.delete(url, headers={"X-Share-Token": token})).status_code == 404


@pytest.mark.asyncio
async def test_author_loses_edit_rights_after_link_revoked(client, owner_headers, other_headers, document):
    doc_id, token, comment_id = await _guest_comment_setup(client, owner_headers, other_headers, document)
    await client.delete(f"/documents/{doc_id}/share", headers=owner_headers)

    response = await client.delete(
        f"/documents/{doc_id}/comments/{comment_id}",
        headers={**other_headers, "X-Share-Token": token},
    )

    assert response.status_code == 404
