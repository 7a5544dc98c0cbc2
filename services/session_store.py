"""
Per-user whitelist of refresh tokens that may still be redeemed.

A live row in refresh_tokens means the token is ISSUED; deleting it moves the
token to CONSUMED. Rows pushed out by MAX_ACTIVE_REFRESH_TOKENS are marked
evicted rather than deleted, so the auth service can reject a late redemption
without mistaking it for a replay. None of these helpers commit: the auth
service owns the transaction so a rotation (consume + add) lands atomically.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import delete, select, update, func

from models import storage
from models.base_model import utcnow
from models.refresh_token import RefreshToken
from utils.security import fingerprint

logger = logging.getLogger(__name__)


def _expiry(payload: dict) -> datetime | None:
    exp = payload.get("exp")
    return datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None


def _live():
    return RefreshToken.evicted_at.is_(None)


def add(user_id: str, refresh_token: str, payload: dict | None = None) -> RefreshToken:
    """Whitelist a freshly issued refresh token, then enforce the per-user cap."""
    session = storage.get_session()
    row = RefreshToken(
        user_id=user_id,
        token_hash=fingerprint(refresh_token),
        issued_at=utcnow(),
        expires_at=_expiry(payload or {}),
    )
    session.add(row)
    session.flush()
    enforce_limit(user_id, keep_id=row.id)
    prune_evicted(user_id)
    return row


def enforce_limit(user_id: str, keep_id: str | None = None) -> int:
    """Evict the oldest live tokens beyond MAX_ACTIVE_REFRESH_TOKENS."""
    limit = current_app.config.get("MAX_ACTIVE_REFRESH_TOKENS", 0)
    if not limit:
        return 0
    session = storage.get_session()
    stmt = (
        select(RefreshToken.id)
        .where(RefreshToken.user_id == user_id, RefreshToken.id != keep_id, _live())
        .order_by(RefreshToken.issued_at.desc())
    )
    others = session.execute(stmt).scalars().all()
    # keep_id counts toward the limit
    surplus = others[limit - 1:] if keep_id else others[limit:]
    if surplus:
        session.execute(
            update(RefreshToken)
            .where(RefreshToken.id.in_(surplus))
            .values(evicted_at=utcnow()),
            execution_options={"synchronize_session": False},
        )
        logger.info("Evicted %d surplus refresh token(s) for user %s", len(surplus), user_id)
    return len(surplus)


def prune_evicted(user_id: str) -> int:
    """Delete evicted rows whose token has expired anyway."""
    session = storage.get_session()
    result = session.execute(
        delete(RefreshToken).where(
            RefreshToken.user_id == user_id,
            RefreshToken.evicted_at.is_not(None),
            RefreshToken.expires_at < utcnow(),
        ),
        execution_options={"synchronize_session": False},
    )
    return result.rowcount


def consume(user_id: str, refresh_token: str) -> bool:
    """
    Remove the token if it is live for user_id.
    One conditional DELETE: of two callers racing on the same token only
    one sees a deleted row.
    """
    session = storage.get_session()
    result = session.execute(
        delete(RefreshToken).where(
            RefreshToken.user_id == user_id,
            RefreshToken.token_hash == fingerprint(refresh_token),
            _live(),
        ),
        execution_options={"synchronize_session": False},
    )
    return result.rowcount == 1


def revoke_all(user_id: str) -> int:
    """Forget every live refresh token of user_id; all sessions must log in again."""
    session = storage.get_session()
    result = session.execute(
        delete(RefreshToken).where(RefreshToken.user_id == user_id, _live()),
        execution_options={"synchronize_session": False},
    )
    return result.rowcount


def is_evicted(user_id: str, refresh_token: str) -> bool:
    """True if the token was pushed out by the cap and never redeemed."""
    session = storage.get_session()
    stmt = select(RefreshToken.id).where(
        RefreshToken.user_id == user_id,
        RefreshToken.token_hash == fingerprint(refresh_token),
        RefreshToken.evicted_at.is_not(None),
    )
    return session.execute(stmt).first() is not None


def contains(user_id: str, refresh_token: str) -> bool:
    session = storage.get_session()
    stmt = select(RefreshToken.id).where(
        RefreshToken.user_id == user_id,
        RefreshToken.token_hash == fingerprint(refresh_token),
        _live(),
    )
    return session.execute(stmt).first() is not None


def active_count(user_id: str) -> int:
    session = storage.get_session()
    stmt = select(func.count(RefreshToken.id)).where(RefreshToken.user_id == user_id, _live())
    return session.execute(stmt).scalar_one()
