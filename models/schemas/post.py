from marshmallow import Schema, fields, EXCLUDE

from models.schemas.common import not_blank


class PostCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=not_blank)


class PostUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(validate=not_blank)


class PostOutSchema(Schema):
    id = fields.String(data_key="_id")
    content = fields.String()
    user_id = fields.String(data_key="userID")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
