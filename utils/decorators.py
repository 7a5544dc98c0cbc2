from __future__ import annotations
from functools import wraps
from flask import request, g
from utils.exceptions import AuthError
from utils.security import decode_access_token


def bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise AuthError("Missing or invalid Authorization header")
    token = auth.split(" ", 1)[1].strip()
    if not token:
        raise AuthError("Missing or invalid Authorization header")
    return token


def jwt_required():
    """
    Require a valid access token. Stateless: the session store is not
    consulted, so an access token outlives the logout of its refresh token
    until its own expiry.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            decoded = decode_access_token(bearer_token())
            g.current_user_id = decoded["sub"]
            return fn(*args, **kwargs)

        return wrapper

    return decorator
