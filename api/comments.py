from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from api.pagination import paginate
from models import storage
from models.comment import Comment
from models.post import Post
from models.user import User
from models.schemas.comment import CommentCreateSchema, CommentUpdateSchema, CommentOutSchema
from utils.decorators import jwt_required
from utils.exceptions import NotFoundError

bp = Blueprint("comments", __name__)

create_schema = CommentCreateSchema()
update_schema = CommentUpdateSchema()
out_schema = CommentOutSchema()
out_list_schema = CommentOutSchema(many=True)


def _get_comment(comment_id: str) -> Comment:
    comment = storage.get(Comment, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    return comment


@bp.post("/comments")
@jwt_required()
def create_comment():
    """
    Comment on a post as the authenticated user
    ---
    tags: [Comments]
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
            postId: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      401: { description: Unauthorized }
      404: { description: Post not found }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    if not storage.get(Post, data["post_id"]):
        raise NotFoundError("Post not found")
    if not storage.get(User, g.current_user_id):
        raise NotFoundError("User not found")
    comment = Comment(content=data["content"], post_id=data["post_id"], user_id=g.current_user_id)
    storage.new(comment)
    storage.save()
    return jsonify({"data": out_schema.dump(comment)}), 201


@bp.get("/comments")
def list_comments():
    """
    List comments, oldest first (optional postId filter)
    ---
    tags: [Comments]
    parameters:
      - in: query
        name: postId
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
    query = storage.get_session().query(Comment)
    post_id = request.args.get("postId")
    if post_id:
        query = query.filter(Comment.post_id == post_id)
    rows, meta = paginate(query, (Comment.created_at.asc(), Comment.id))
    return jsonify({"data": out_list_schema.dump(rows), "meta": meta})


@bp.get("/comments/<comment_id>")
def get_comment(comment_id: str):
    """
    Get a comment by id
    ---
    tags: [Comments]
    parameters:
      - in: path
        name: comment_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    return jsonify({"data": out_schema.dump(_get_comment(comment_id))})


@bp.get("/comments/user/<user_id>")
def list_comments_by_user(user_id: str):
    """
    Get all comments written by a user
    ---
    tags: [Comments]
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
    """
    rows = (
        storage.get_session()
        .query(Comment)
        .filter(Comment.user_id == user_id)
        .order_by(Comment.created_at.asc(), Comment.id)
        .all()
    )
    return jsonify({"data": out_list_schema.dump(rows)})


@bp.put("/comments/<comment_id>")
@jwt_required()
def update_comment(comment_id: str):
    """
    Update a comment (partial)
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: comment_id
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
    comment = _get_comment(comment_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    if "content" in data:
        comment.content = data["content"]
    comment.save()
    return jsonify({"data": out_schema.dump(comment)})


@bp.delete("/comments/<comment_id>")
@jwt_required()
def delete_comment(comment_id: str):
    """
    Delete a comment
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: comment_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      401: { description: Unauthorized }
      404: { description: Not found }
    """
    comment = _get_comment(comment_id)
    comment.delete()
    storage.save()
    return jsonify({"message": "Comment deleted successfully"})
