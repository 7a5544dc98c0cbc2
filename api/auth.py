"""
Authentication blueprint:
- POST /register
- POST /login
- POST /refresh-token
- POST /logout

The views only parse the body and render the result; the rules (token
rotation, reuse detection, identical credential errors) live in
services.auth_service.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from models.schemas.auth import (
    RegisterSchema,
    LoginSchema,
    RefreshTokenSchema,
    TokenPairOutSchema,
)
from services.auth_service import auth_service

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
token_pair_out_schema = TokenPairOutSchema()


def _body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
def register():
    """
    Register a new user and open a first session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, email, password]
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created, returns token and refreshToken
      400:
        description: Missing field
      409:
        description: Email already in use
    """
    data = register_schema.load(_body())
    pair = auth_service.register(data.get("username"), data.get("email"), data.get("password"))
    return jsonify(token_pair_out_schema.dump(pair._asdict())), 201


@bp.post("/login")
def login():
    """
    Login: returns token and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Missing email or password
      401:
        description: Invalid email or password
    """
    data = login_schema.load(_body())
    pair = auth_service.login(data.get("email"), data.get("password"))
    return jsonify(token_pair_out_schema.dump(pair._asdict())), 200


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange a refresh token for a new pair (rotation).
    Reusing a refresh token revokes every session of its owner.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns new tokens)
      400:
        description: Missing refreshToken
      401:
        description: Invalid, expired or reused refresh token
    """
    data = refresh_token_schema.load(_body())
    pair = auth_service.refresh(data.get("refresh_token"))
    return jsonify(token_pair_out_schema.dump(pair._asdict())), 200


@bp.post("/logout")
def logout():
    """
    Logout: consumes the refresh token of this session
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Logged out
      400:
        description: Missing refreshToken
      401:
        description: Invalid, expired or reused refresh token
    """
    data = refresh_token_schema.load(_body())
    auth_service.logout(data.get("refresh_token"))
    return jsonify({"message": "Logged out successfully"}), 200
