from marshmallow import Schema, fields, pre_load

from models.schemas.common import normalize_email, max_length


class UserUpdateSchema(Schema):
    username = fields.String(validate=max_length(64))
    email = fields.Email()

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = normalize_email(data["email"])
        return data


class UserOutSchema(Schema):
    # password_hash and refresh_tokens are never exposed
    id = fields.String(data_key="_id")
    username = fields.String()
    email = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
