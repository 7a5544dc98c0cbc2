from __future__ import annotations

from flask import Blueprint, request, jsonify, g
from sqlalchemy import or_

from api.pagination import paginate
from models import storage
from models.user import User
from models.schemas.user import UserUpdateSchema, UserOutSchema
from utils.decorators import jwt_required
from utils.exceptions import ConflictError, NotFoundError

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


def _get_user(user_id: str) -> User:
    user = storage.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@bp.get("/users")
def list_users():
    """
    List all Users
    ---
    tags:
      - Users
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200: { description: OK }
    """
    query = storage.get_session().query(User)
    rows, meta = paginate(query, (User.username.asc(),))
    return jsonify({"data": user_list_out_schema.dump(rows), "meta": meta})


@bp.get("/users/<user_id>")
def get_user(user_id: str):
    """
    Get a user by id
    ---
    tags:
      - Users
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    return jsonify({"data": user_out_schema.dump(_get_user(user_id))})


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      404:
        description: Account no longer exists
    """
    return jsonify({"data": user_out_schema.dump(_get_user(g.current_user_id))}), 200


@bp.put("/users/<user_id>")
@jwt_required()
def update_user(user_id: str):
    """
    Update username and/or email of a user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string }
            email: { type: string }
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
      404: { description: Not found }
      409: { description: Username or email already exists }
    """
    user = _get_user(user_id)
    data = user_update_schema.load(request.get_json(silent=True) or {})

    clashes = []
    if data.get("username") and data["username"] != user.username:
        clashes.append(User.username == data["username"])
    if data.get("email") and data["email"] != user.email:
        clashes.append(User.email == data["email"])
    if clashes:
        taken = storage.get_session().query(User).filter(User.id != user.id, or_(*clashes)).first()
        if taken:
            raise ConflictError("Username or email already exists")

    for field in ("username", "email"):
        if data.get(field):
            setattr(user, field, data[field])
    user.save()
    return jsonify({"data": user_out_schema.dump(user)}), 200


@bp.delete("/users/<user_id>")
@jwt_required()
def delete_user(user_id: str):
    """
    Delete a user together with their sessions, posts and comments
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      401: { description: Unauthorized }
      404: { description: Not found }
    """
    user = _get_user(user_id)
    user.delete()
    storage.save()
    return jsonify({"message": "User deleted successfully"}), 200
