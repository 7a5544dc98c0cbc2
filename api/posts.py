from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from api.pagination import paginate
from models import storage
from models.post import Post
from models.user import User
from models.schemas.post import PostCreateSchema, PostUpdateSchema, PostOutSchema
from utils.decorators import jwt_required
from utils.exceptions import NotFoundError

bp = Blueprint("posts", __name__)

create_schema = PostCreateSchema()
update_schema = PostUpdateSchema()
out_schema = PostOutSchema()
out_list_schema = PostOutSchema(many=True)


def _get_post(post_id: str) -> Post:
    post = storage.get(Post, post_id)
    if not post:
        raise NotFoundError("Post not found")
    return post


@bp.post("/posts")
@jwt_required()
def create_post():
    """
    Create a post as the authenticated user
    ---
    tags: [Posts]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            content: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      401: { description: Unauthorized }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    if not storage.get(User, g.current_user_id):
        raise NotFoundError("User not found")
    post = Post(content=data["content"], user_id=g.current_user_id)
    storage.new(post)
    storage.save()
    return jsonify({"data": out_schema.dump(post)}), 201


@bp.get("/posts")
def list_posts():
    """
    List posts, newest first (optional userID filter)
    ---
    tags: [Posts]
    parameters:
      - in: query
        name: userID
        type: string
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
    query = storage.get_session().query(Post)
    user_id = request.args.get("userID")
    if user_id:
        query = query.filter(Post.user_id == user_id)
    rows, meta = paginate(query, (Post.created_at.desc(), Post.id))
    return jsonify({"data": out_list_schema.dump(rows), "meta": meta})


@bp.get("/posts/<post_id>")
def get_post(post_id: str):
    """
    Get a post by id
    ---
    tags: [Posts]
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    return jsonify({"data": out_schema.dump(_get_post(post_id))})


@bp.get("/posts/user/<user_id>")
def list_posts_by_user(user_id: str):
    """
    Get all posts of a user
    ---
    tags: [Posts]
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: No posts found for this user }
    """
    rows = (
        storage.get_session()
        .query(Post)
        .filter(Post.user_id == user_id)
        .order_by(Post.created_at.desc(), Post.id)
        .all()
    )
    if not rows:
        raise NotFoundError("No posts found for this user")
    return jsonify({"data": out_list_schema.dump(rows)})


@bp.put("/posts/<post_id>")
@jwt_required()
def update_post(post_id: str):
    """
    Update a post (partial)
    ---
    tags: [Posts]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            content: { type: string }
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
      404: { description: Not found }
    """
    post = _get_post(post_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    if "content" in data:
        post.content = data["content"]
    post.save()
    return jsonify({"data": out_schema.dump(post)})


@bp.delete("/posts/<post_id>")
@jwt_required()
def delete_post(post_id: str):
    """
    Delete a post and its comments
    ---
    tags: [Posts]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      401: { description: Unauthorized }
      404: { description: Not found }
    """
    post = _get_post(post_id)
    post.delete()
    storage.save()
    return jsonify({"message": "Post deleted successfully"})
