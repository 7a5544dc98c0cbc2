from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import auth_header


@pytest.fixture
def post(client, user_tokens):
    resp = client.post(
        "/posts",
        json={"content": "This is a test post"},
        headers=auth_header(user_tokens["token"]),
    )
    assert resp.status_code == 201
    return resp.get_json()["data"]


class TestGuard:
    def test_no_authorization_header(self, client):
        resp = client.post("/posts", json={"content": "x"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"

    def test_garbage_bearer(self, client):
        resp = client.post("/posts", json={"content": "x"}, headers=auth_header("garbage"))
        assert resp.status_code == 401

    def test_malformed_header(self, client, user_tokens):
        resp = client.post(
            "/posts", json={"content": "x"}, headers={"Authorization": user_tokens["token"]}
        )
        assert resp.status_code == 401
        resp = client.post("/posts", json={"content": "x"}, headers={"Authorization": "Bearer "})
        assert resp.status_code == 401

    def test_refresh_token_is_not_an_access_token(self, client, user_tokens):
        resp = client.post(
            "/posts", json={"content": "x"}, headers=auth_header(user_tokens["refreshToken"])
        )
        assert resp.status_code == 401

    def test_expired_access_token(self, client, app, user_tokens):
        app.config["ACCESS_TTL"] = timedelta(seconds=-1)
        expired = client.post(
            "/login", json={"email": "alice@example.com", "password": "S3cret!pass"}
        ).get_json()["token"]
        resp = client.post("/posts", json={"content": "x"}, headers=auth_header(expired))
        assert resp.status_code == 401

    def test_access_token_outlives_logout(self, client, user_tokens):
        assert client.post("/logout", json={"refreshToken": user_tokens["refreshToken"]}).status_code == 200
        resp = client.post(
            "/posts", json={"content": "still allowed"}, headers=auth_header(user_tokens["token"])
        )
        assert resp.status_code == 201


class TestPosts:
    def test_create_sets_author_from_token(self, client, post, user_tokens):
        me = client.get("/me", headers=auth_header(user_tokens["token"])).get_json()["data"]
        assert post["userID"] == me["_id"]
        assert post["content"] == "This is a test post"

    def test_create_requires_content(self, client, user_tokens):
        resp = client.post("/posts", json={}, headers=auth_header(user_tokens["token"]))
        assert resp.status_code == 400
        assert "content" in resp.get_json()["details"]

    def test_list_and_get(self, client, post):
        listing = client.get("/posts").get_json()
        assert listing["meta"]["total"] == 1
        assert listing["data"][0]["_id"] == post["_id"]

        resp = client.get(f"/posts/{post['_id']}")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["content"] == post["content"]

    def test_get_missing(self, client):
        assert client.get("/posts/does-not-exist").status_code == 404

    def test_filter_by_user(self, client, post):
        user_id = post["userID"]
        assert client.get(f"/posts?userID={user_id}").get_json()["meta"]["total"] == 1
        assert client.get("/posts?userID=nobody").get_json()["meta"]["total"] == 0
        assert len(client.get(f"/posts/user/{user_id}").get_json()["data"]) == 1
        assert client.get("/posts/user/nobody").status_code == 404

    def test_pagination_params(self, client, post):
        assert client.get("/posts?page=x").status_code == 400
        meta = client.get("/posts?page=0&limit=1000").get_json()["meta"]
        assert meta["page"] == 1 and meta["limit"] == 100

    def test_update(self, client, post, user_tokens):
        headers = auth_header(user_tokens["token"])
        resp = client.put(f"/posts/{post['_id']}", json={"content": "edited"}, headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["content"] == "edited"
        assert client.put("/posts/missing", json={"content": "x"}, headers=headers).status_code == 404
        assert client.put(f"/posts/{post['_id']}", json={"content": "x"}).status_code == 401

    def test_delete(self, client, post, user_tokens):
        headers = auth_header(user_tokens["token"])
        assert client.delete(f"/posts/{post['_id']}").status_code == 401
        resp = client.delete(f"/posts/{post['_id']}", headers=headers)
        assert resp.status_code == 200
        assert client.get(f"/posts/{post['_id']}").status_code == 404
        assert client.delete(f"/posts/{post['_id']}", headers=headers).status_code == 404
