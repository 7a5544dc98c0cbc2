"""
HTTP tests for /register, /login, /refresh-token and /logout.

Covers token rotation and reuse detection: a refresh token can be redeemed
once; redeeming it again (or after logout) revokes every session of the
user until the next login.
"""
from __future__ import annotations

import logging

import jwt
from sqlalchemy.exc import SQLAlchemyError

from conftest import register
from models import storage
from models.user import User
from services import session_store


def _refresh(client, token):
    return client.post("/refresh-token", json={"refreshToken": token})


def _logout(client, token):
    return client.post("/logout", json={"refreshToken": token})


def _login(client, email="alice@example.com", password="S3cret!pass"):
    return client.post("/login", json={"email": email, "password": password})


def _user_id(token: str) -> str:
    return jwt.decode(token, options={"verify_signature": False})["sub"]


class TestRegister:
    def test_register_returns_distinct_tokens(self, client, app):
        resp = register(client)
        assert resp.status_code == 201
        body = resp.get_json()
        assert set(body) == {"token", "refreshToken"}
        assert body["token"] != body["refreshToken"]

        with app.app_context():
            user_id = _user_id(body["token"])
            assert session_store.contains(user_id, body["refreshToken"])
            assert session_store.active_count(user_id) == 1

    def test_register_hashes_password(self, client, app):
        register(client)
        with app.app_context():
            user = storage.get_session().query(User).filter_by(email="alice@example.com").one()
            assert user.password_hash != "S3cret!pass"
            assert user.password_hash.startswith("$argon2")

    def test_register_normalizes_email(self, client):
        resp = register(client, email="  Alice@Example.COM ")
        assert resp.status_code == 201
        assert _login(client, email="alice@example.com").status_code == 200

    def test_register_missing_fields(self, client):
        for body in (
            {"email": "a@example.com", "password": "pw"},
            {"username": "a", "password": "pw"},
            {"username": "a", "email": "a@example.com"},
            {},
        ):
            resp = client.post("/register", json=body)
            assert resp.status_code == 400
            assert resp.get_json()["error"] == "VALIDATION_ERROR"

    def test_register_without_json_body(self, client):
        resp = client.post("/register", data="not json", content_type="text/plain")
        assert resp.status_code == 400

    def test_register_duplicate_email(self, client):
        register(client)
        resp = register(client, username="alice2")
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Email already in use"

    def test_register_duplicate_username(self, client):
        register(client)
        resp = register(client, email="other@example.com")
        assert resp.status_code == 409


class TestLogin:
    def test_login_returns_tokens(self, client, user_tokens):
        resp = _login(client)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["token"] and body["refreshToken"]
        assert body["refreshToken"] != user_tokens["refreshToken"]

    def test_repeated_logins_keep_every_session(self, client, app, user_tokens):
        tokens = [_login(client).get_json()["refreshToken"] for _ in range(3)]
        assert len(set(tokens)) == 3
        with app.app_context():
            user_id = _user_id(user_tokens["token"])
            assert session_store.active_count(user_id) == 4
            for token in tokens + [user_tokens["refreshToken"]]:
                assert session_store.contains(user_id, token)

    def test_wrong_password_and_unknown_email_look_the_same(self, client, user_tokens):
        wrong_pw = _login(client, password="nope")
        unknown = _login(client, email="nobody@example.com")
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.get_json()["message"] == unknown.get_json()["message"] == "Invalid email or password"

    def test_login_missing_fields(self, client):
        assert client.post("/login", json={"email": "a@example.com"}).status_code == 400
        assert client.post("/login", json={"password": "x"}).status_code == 400


class TestRefresh:
    def test_refresh_rotates_tokens(self, client, app, user_tokens):
        old = user_tokens["refreshToken"]
        resp = _refresh(client, old)
        assert resp.status_code == 200
        new = resp.get_json()["refreshToken"]
        assert new != old
        with app.app_context():
            user_id = _user_id(old)
            assert not session_store.contains(user_id, old)
            assert session_store.contains(user_id, new)
            assert session_store.active_count(user_id) == 1

    def test_refresh_missing_token(self, client):
        resp = client.post("/refresh-token", json={})
        assert resp.status_code == 400

    def test_refresh_garbage_token(self, client):
        assert _refresh(client, "not.a.token").status_code == 401

    def test_refresh_rejects_access_token(self, client, user_tokens):
        assert _refresh(client, user_tokens["token"]).status_code == 401

    def test_refresh_for_deleted_user(self, client, app, user_tokens):
        with app.app_context():
            user = storage.get(User, _user_id(user_tokens["token"]))
            storage.delete(user)
            storage.save()
        assert _refresh(client, user_tokens["refreshToken"]).status_code == 401

    def test_reuse_revokes_all_sessions(self, client, app, caplog):
        register(client)
        r1 = _login(client).get_json()["refreshToken"]

        first = _refresh(client, r1)
        assert first.status_code == 200
        r2 = first.get_json()["refreshToken"]

        with caplog.at_level(logging.WARNING, logger="services.auth_service"):
            replay = _refresh(client, r1)
        assert replay.status_code == 401
        assert "Possible refresh token theft" in caplog.text

        # the legitimate holder of r2 is logged out as well
        assert _refresh(client, r2).status_code == 401
        with app.app_context():
            assert session_store.active_count(_user_id(r1)) == 0

        # a new login starts over
        r3 = _login(client).get_json()["refreshToken"]
        assert _refresh(client, r3).status_code == 200

    def test_reuse_does_not_touch_other_users(self, client, user_tokens):
        bob = register(client, username="bob", email="bob@example.com").get_json()
        r1 = user_tokens["refreshToken"]
        _refresh(client, r1)
        assert _refresh(client, r1).status_code == 401
        assert _refresh(client, bob["refreshToken"]).status_code == 200

    def test_evicted_token_does_not_end_other_sessions(self, client, app, user_tokens, caplog):
        app.config["MAX_ACTIVE_REFRESH_TOKENS"] = 3
        evicted = user_tokens["refreshToken"]
        newer = [_login(client).get_json()["refreshToken"] for _ in range(3)]

        with caplog.at_level(logging.WARNING, logger="services.auth_service"):
            resp = _refresh(client, evicted)
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"
        assert "Possible refresh token theft" not in caplog.text

        with app.app_context():
            assert session_store.active_count(_user_id(evicted)) == 3
        for token in newer:
            assert _refresh(client, token).status_code == 200

    def test_failed_commit_leaves_token_redeemable(self, client, app, user_tokens, monkeypatch):
        def failing_save():
            raise SQLAlchemyError("disk I/O error")

        token = user_tokens["refreshToken"]
        monkeypatch.setattr(storage, "save", failing_save)
        resp = _refresh(client, token)
        assert resp.status_code == 500
        assert resp.get_json()["error"] == "INTERNAL_ERROR"

        monkeypatch.undo()
        with app.app_context():
            user_id = _user_id(token)
            assert session_store.contains(user_id, token)
            assert session_store.active_count(user_id) == 1
        assert _refresh(client, token).status_code == 200


class TestLogout:
    def test_logout(self, client, app, user_tokens):
        resp = _logout(client, user_tokens["refreshToken"])
        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Logged out successfully"}
        with app.app_context():
            assert session_store.active_count(_user_id(user_tokens["token"])) == 0

    def test_refresh_after_logout_fails(self, client, user_tokens):
        _logout(client, user_tokens["refreshToken"])
        assert _refresh(client, user_tokens["refreshToken"]).status_code == 401

    def test_logout_is_not_idempotent(self, client, user_tokens):
        assert _logout(client, user_tokens["refreshToken"]).status_code == 200
        assert _logout(client, user_tokens["refreshToken"]).status_code == 401

    def test_logout_only_ends_one_session(self, client, user_tokens):
        other = _login(client).get_json()["refreshToken"]
        assert _logout(client, user_tokens["refreshToken"]).status_code == 200
        assert _refresh(client, other).status_code == 200

    def test_logout_missing_token(self, client):
        assert client.post("/logout", json={}).status_code == 400

    def test_logout_invalid_token_is_unauthorized(self, client):
        resp = _logout(client, "invalid-token")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"

    def test_logout_with_consumed_token_revokes_everything(self, client, user_tokens):
        r1 = user_tokens["refreshToken"]
        r2 = _refresh(client, r1).get_json()["refreshToken"]
        assert _logout(client, r1).status_code == 401
        assert _refresh(client, r2).status_code == 401
