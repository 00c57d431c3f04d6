"""Tests for board HTTP routes."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from anonboard.board.exceptions import BoardError
from anonboard.board.dependencies import handle_board_error


BASE = "/v1/community"


def create_post(client: TestClient, headers: dict[str, str], **overrides) -> dict:
    payload = {"title": "Soap", "content": "Wash hands", "category": "tips"}
    payload.update(overrides)
    response = client.post(f"{BASE}/posts", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestErrorMapping:
    """Tests for handle_board_error."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("unauthenticated", 401),
            ("forbidden", 403),
            ("not_found", 404),
            ("validation_failed", 422),
            ("store_unavailable", 503),
            ("something_else", 500),
        ],
    )
    def test_status_by_code(self, code: str, expected: int) -> None:
        exc = handle_board_error(BoardError("message", code))
        assert exc.status_code == expected
        assert exc.detail == "message"


class TestAuthentication:
    """Routes require a bearer token."""

    def test_missing_token(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/posts")
        assert response.status_code == 401
        assert response.json()["request_id"]

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.get(
            f"{BASE}/posts", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_service_unavailable(self, client: TestClient, auth_headers) -> None:
        client.app.state.board_service = None
        response = client.get(f"{BASE}/posts", headers=auth_headers())
        assert response.status_code == 503


class TestPostRoutes:
    """Tests for post routes."""

    def test_create_and_list(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers("user-a")
        created = create_post(client, headers)

        assert created["author_id"] == "user-a"
        assert created["author_name"].startswith("익명")
        assert created["report_state"] == "clean"

        response = client.get(f"{BASE}/posts", headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == created["id"]
        assert data["items"][0]["comment_count"] == 0

    def test_list_unknown_category(self, client: TestClient, auth_headers) -> None:
        response = client.get(
            f"{BASE}/posts", params={"category": "news"}, headers=auth_headers()
        )
        assert response.status_code == 422

    def test_create_blank_title(self, client: TestClient, auth_headers) -> None:
        response = client.post(
            f"{BASE}/posts",
            json={"title": "   ", "content": "c", "category": "tips"},
            headers=auth_headers(),
        )
        assert response.status_code == 422

    def test_detail_with_thread(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers("user-a")
        post = create_post(client, headers)
        root = client.post(
            f"{BASE}/comments",
            json={"post_id": post["id"], "content": "root"},
            headers=headers,
        ).json()
        client.post(
            f"{BASE}/comments",
            json={
                "post_id": post["id"],
                "content": "reply",
                "parent_comment_id": root["id"],
            },
            headers=auth_headers("user-b"),
        )

        response = client.get(f"{BASE}/posts/{post['id']}", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["post"]["views"] == 1
        assert len(data["comments"]) == 2
        assert len(data["thread"]) == 1
        assert data["thread"][0]["replies"][0]["content"] == "reply"

    def test_detail_missing(self, client: TestClient, auth_headers) -> None:
        response = client.get(f"{BASE}/posts/{uuid4()}", headers=auth_headers())
        assert response.status_code == 404

    def test_update_by_other_member_forbidden(
        self, client: TestClient, auth_headers
    ) -> None:
        post = create_post(client, auth_headers("user-a"))
        response = client.put(
            f"{BASE}/posts/{post['id']}",
            json={"title": "Hijacked"},
            headers=auth_headers("user-b"),
        )
        assert response.status_code == 403

    def test_update_partial(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers("user-a")
        post = create_post(client, headers)
        response = client.put(
            f"{BASE}/posts/{post['id']}",
            json={"category": "suggestions"},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["category"] == "suggestions"
        assert response.json()["title"] == "Soap"

    def test_owner_deletes_post(self, client: TestClient, auth_headers) -> None:
        post = create_post(client, auth_headers("user-a"))

        forbidden = client.delete(
            f"{BASE}/posts/{post['id']}", headers=auth_headers("user-b")
        )
        deleted = client.delete(
            f"{BASE}/posts/{post['id']}", headers=auth_headers("boss", "owner")
        )
        gone = client.get(f"{BASE}/posts/{post['id']}", headers=auth_headers())

        assert forbidden.status_code == 403
        assert deleted.status_code == 200
        assert deleted.json()["success"] is True
        assert gone.status_code == 404


class TestToggleRoutes:
    """Tests for like, report and resolve routes."""

    def test_like_toggle(self, client: TestClient, auth_headers) -> None:
        post = create_post(client, auth_headers("user-a"))
        url = f"{BASE}/posts/{post['id']}/like"

        first = client.put(url, headers=auth_headers("user-b")).json()
        second = client.put(url, headers=auth_headers("user-b")).json()

        assert first == {"likes": ["user-b"], "like_count": 1, "liked": True}
        assert second == {"likes": [], "like_count": 0, "liked": False}

    def test_report_and_resolve(self, client: TestClient, auth_headers) -> None:
        post = create_post(client, auth_headers("user-a"))

        reported = client.put(
            f"{BASE}/posts/{post['id']}/report", headers=auth_headers("user-b")
        ).json()
        member_resolve = client.put(
            f"{BASE}/posts/{post['id']}/resolve", headers=auth_headers("user-c")
        )
        owner_resolve = client.put(
            f"{BASE}/posts/{post['id']}/resolve",
            headers=auth_headers("boss", "owner"),
        )
        detail = client.get(f"{BASE}/posts/{post['id']}", headers=auth_headers())

        assert reported["report_state"] == "reported"
        assert reported["reports"][0]["user_id"] == "user-b"
        assert member_resolve.status_code == 403
        assert owner_resolve.status_code == 200
        assert detail.json()["post"]["report_state"] == "clean"

    def test_stats(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers("user-a")
        post = create_post(client, headers)
        create_post(client, headers, category="suggestions")
        client.put(f"{BASE}/posts/{post['id']}/report", headers=headers)
        client.post(
            f"{BASE}/comments",
            json={"post_id": post["id"], "content": "hi"},
            headers=headers,
        )

        response = client.get(f"{BASE}/stats", headers=headers)

        assert response.status_code == 200
        assert response.json() == {
            "tips_today": 1,
            "suggestions_today": 1,
            "comments_today": 1,
            "reports_today": 1,
        }


class TestCommentRoutes:
    """Tests for comment routes."""

    def test_nested_reply_rejected(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers("user-a")
        post = create_post(client, headers)
        root = client.post(
            f"{BASE}/comments",
            json={"post_id": post["id"], "content": "root"},
            headers=headers,
        ).json()
        reply = client.post(
            f"{BASE}/comments",
            json={
                "post_id": post["id"],
                "content": "reply",
                "parent_comment_id": root["id"],
            },
            headers=headers,
        ).json()

        response = client.post(
            f"{BASE}/comments",
            json={
                "post_id": post["id"],
                "content": "deeper",
                "parent_comment_id": reply["id"],
            },
            headers=headers,
        )

        assert response.status_code == 422

    def test_edit_like_delete(self, client: TestClient, auth_headers) -> None:
        author = auth_headers("user-b")
        post = create_post(client, auth_headers("user-a"))
        comment = client.post(
            f"{BASE}/comments",
            json={"post_id": post["id"], "content": "hi"},
            headers=author,
        ).json()
        url = f"{BASE}/comments/{comment['id']}"

        edited = client.put(url, json={"content": "edited"}, headers=author)
        liked = client.put(f"{url}/like", headers=auth_headers("user-a"))
        deleted = client.delete(url, headers=author)
        missing = client.delete(url, headers=author)

        assert edited.json()["content"] == "edited"
        assert liked.json()["liked"] is True
        assert deleted.status_code == 200
        assert missing.status_code == 404
