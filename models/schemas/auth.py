"""
Request bodies for the auth endpoints.

Fields are deliberately not `required=True`: absence is reported by the
auth service itself so that callers bypassing HTTP get the same errors.
"""
from marshmallow import Schema, fields, pre_load, EXCLUDE

from models.schemas.common import normalize_email


class _EmailNormalizingSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = normalize_email(data["email"])
        return data


class RegisterSchema(_EmailNormalizingSchema):
    username = fields.String(allow_none=True)
    email = fields.String(allow_none=True)
    password = fields.String(allow_none=True, load_only=True)


class LoginSchema(_EmailNormalizingSchema):
    email = fields.String(allow_none=True)
    password = fields.String(allow_none=True, load_only=True)


class RefreshTokenSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", allow_none=True)


class TokenPairOutSchema(Schema):
    access_token = fields.String(data_key="token")
    refresh_token = fields.String(data_key="refreshToken")
