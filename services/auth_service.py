"""
Register / login / refresh / logout.

Every successful operation hands out a token pair and whitelists its refresh
token. A refresh token is redeemable exactly once (refresh or logout);
presenting one that is not whitelisted for its user is treated as token
theft and wipes all of that user's sessions.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import storage
from models.schemas.common import normalize_email
from models.user import User
from services import session_store
from utils.exceptions import ApiError, AuthError, ConflictError, InternalError, ValidationError
from utils.security import (
    TokenPair,
    decode_refresh_token,
    hash_password,
    issue_token_pair,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
EVICTED_REFRESH_TOKEN = "Session ended by newer logins; please log in again"


def _missing(*values) -> bool:
    return any(v is None or (isinstance(v, str) and not v.strip()) for v in values)


class AuthService:
    """Stateless orchestration over DBStorage and the session store."""

    def register(self, username: str, email: str, password: str) -> TokenPair:
        if _missing(username, email, password):
            raise ValidationError("Username, email and password are required")
        email = normalize_email(email)

        with _transaction("registering user"):
            session = storage.get_session()
            existing = (
                session.query(User)
                .filter(or_(User.email == email, User.username == username))
                .first()
            )
            if existing:
                if existing.email == email:
                    raise ConflictError("Email already in use")
                raise ConflictError("Username already in use")

            user = User(username=username, email=email, password_hash=hash_password(password))
            storage.new(user)
            session.flush()
            pair = self._issue(user.id)
        logger.info("Registered user %s", user.id)
        return pair

    def login(self, email: str, password: str) -> TokenPair:
        if _missing(email, password):
            raise ValidationError("Email and password are required")
        email = normalize_email(email)

        with _transaction("logging in"):
            session = storage.get_session()
            user = session.query(User).filter(User.email == email).first()
            # same message for unknown email and wrong password
            if not user or not verify_password(password, user.password_hash):
                raise AuthError(INVALID_CREDENTIALS)
            pair = self._issue(user.id)
        return pair

    def refresh(self, refresh_token: str) -> TokenPair:
        """Rotate: consume refresh_token and issue a new pair."""
        if _missing(refresh_token):
            raise ValidationError("Refresh token is required")

        with _transaction("refreshing token"):
            user = self._redeem(refresh_token)
            pair = self._issue(user.id)
        return pair

    def logout(self, refresh_token: str) -> None:
        """Consume refresh_token without issuing a replacement."""
        if _missing(refresh_token):
            raise ValidationError("Refresh token is required")

        with _transaction("logging out"):
            user = self._redeem(refresh_token)
        logger.info("User %s logged out one session", user.id)

    def _issue(self, user_id: str) -> TokenPair:
        pair = issue_token_pair(user_id)
        session_store.add(user_id, pair.refresh_token, decode_refresh_token(pair.refresh_token))
        return pair

    def _redeem(self, refresh_token: str) -> User:
        """
        Move refresh_token from ISSUED to CONSUMED and return its owner.
        A verified token that is no longer whitelisted revokes every session
        of its owner; that revocation is committed before AuthError is raised.
        Tokens evicted by the session cap are rejected without revoking.
        """
        payload = decode_refresh_token(refresh_token)
        user = storage.get(User, payload.get("sub"))
        if not user:
            raise AuthError(INVALID_REFRESH_TOKEN)

        if not session_store.consume(user.id, refresh_token):
            if session_store.is_evicted(user.id, refresh_token):
                logger.info("Rejected evicted refresh token for user %s", user.id)
                raise AuthError(EVICTED_REFRESH_TOKEN)
            revoked = session_store.revoke_all(user.id)
            storage.save()
            logger.warning(
                "Possible refresh token theft for user %s; revoked %d session(s)", user.id, revoked
            )
            raise AuthError(INVALID_REFRESH_TOKEN)
        return user


@contextmanager
def _transaction(action: str):
    """
    Commit on success. On failure roll back; ApiErrors pass through,
    uniqueness races become ConflictError and other database failures
    become InternalError.
    """
    try:
        yield
    except ApiError:
        storage.rollback()
        raise
    except IntegrityError as err:
        storage.rollback()
        raise ConflictError("Username or email already exists") from err
    except SQLAlchemyError as err:
        storage.rollback()
        logger.exception("Database error while %s", action)
        raise InternalError(f"Error {action}") from err
    except Exception:
        storage.rollback()
        raise

    try:
        storage.save()
    except IntegrityError as err:
        storage.rollback()
        raise ConflictError("Username or email already exists") from err
    except SQLAlchemyError as err:
        storage.rollback()
        logger.exception("Commit failed while %s", action)
        raise InternalError(f"Error {action}") from err


auth_service = AuthService()
