from marshmallow import Schema, fields, EXCLUDE

from models.schemas.common import not_blank


class CommentCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=not_blank)
    post_id = fields.String(required=True, data_key="postId")


class CommentUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(validate=not_blank)


class CommentOutSchema(Schema):
    id = fields.String(data_key="_id")
    content = fields.String()
    post_id = fields.String(data_key="postId")
    user_id = fields.String(data_key="userId")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
