"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access/refresh token pair issuance and verification via PyJWT
- SHA-256 fingerprints for storing refresh tokens
"""
from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timezone
from typing import Dict, Any, NamedTuple

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

from flask import current_app

from utils.exceptions import AuthError

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def generate_nonce() -> str:
    """128 bits of randomness so two refresh tokens minted in the same second differ."""
    return secrets.token_hex(16)


def fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _secret(token_type: str) -> str:
    key = "ACCESS_SECRET" if token_type == ACCESS else "REFRESH_SECRET"
    return current_app.config[key]


def _ttl(token_type: str):
    key = "ACCESS_TTL" if token_type == ACCESS else "REFRESH_TTL"
    return current_app.config[key]


def _encode(subject: str, token_type: str, **claims) -> str:
    now = _now()
    payload = {
        "iss": current_app.config.get("JWT_ISSUER", "blog-api"),
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int((now + _ttl(token_type)).timestamp()),
        "type": token_type,
        **claims,
    }
    return jwt.encode(payload, _secret(token_type), algorithm=current_app.config["JWT_ALGORITHM"])


def create_access_token(subject: str) -> str:
    return _encode(subject, ACCESS)


def create_refresh_token(subject: str) -> str:
    return _encode(subject, REFRESH, nonce=generate_nonce())


def issue_token_pair(identity_id: str) -> TokenPair:
    """
    Mint a signed access token and a signed refresh token for identity_id.
    Does not touch the session store; recording the refresh token is the
    caller's job.
    """
    return TokenPair(create_access_token(identity_id), create_refresh_token(identity_id))


def decode_token(token: str, expected_type: str = ACCESS) -> Dict[str, Any]:
    """
    Decode and validate a JWT against the key for expected_type.
    Raises AuthError on a bad signature, expiry, wrong issuer or wrong type.
    """
    try:
        decoded = jwt.decode(
            token,
            _secret(expected_type),
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            issuer=current_app.config.get("JWT_ISSUER", "blog-api"),
            options={"require": ["exp", "sub", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError as exc:
        raise AuthError(f"Invalid token: {exc}")

    if decoded.get("type") != expected_type:
        raise AuthError("Wrong token type")
    return decoded


def decode_access_token(token: str) -> Dict[str, Any]:
    return decode_token(token, ACCESS)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return decode_token(token, REFRESH)
