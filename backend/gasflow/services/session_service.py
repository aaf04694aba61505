# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

Tokens are cryptographically secure, hashed in the database and
time-limited. A session carries the role claim captured at login and the
tenant context derived from it: a USER session's tenant is the user itself,
an ADMIN session has no tenant.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- Absolute timeout (SESSION_ABSOLUTE_TIMEOUT_HOURS, default 24)
- Idle timeout (SESSION_IDLE_TIMEOUT_HOURS, default 2)
- Revocable on logout, deactivation and password reset
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from flask import current_app

from ..extensions import db
from ..models import ROLE_USER, SessionToken, User
from ..time_utils import utcnow


@dataclass
class SessionContext:
    """Identity and tenant context for one authenticated request."""
    user: User
    session: SessionToken
    role: str
    tenant_id: int | None  # None for ADMIN sessions


def _absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24))


def _idle_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_IDLE_TIMEOUT_HOURS", 2))


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy); never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 is sufficient for high-entropy tokens (unlike passwords)."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user: User,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[SessionToken, str]:
    """
    Create new session token for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    plaintext_token = generate_token()

    now = utcnow()
    session = SessionToken(
        user_id=user.id,
        role=user.role,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_timeout(),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
        is_revoked=False
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def _revoke(session: SessionToken, reason: str, now: datetime) -> None:
    session.is_revoked = True
    session.revoked_at = now
    session.revoked_reason = reason


def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if the token is unknown, expired, idle too long, revoked,
    or its user has been deactivated. Idle and deactivated sessions are
    revoked on the way out. Updates last_used_at on success.
    """
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False
    ).first()

    if not session:
        return None

    # Check absolute timeout
    if _naive_utc(session.expires_at) < now:
        return None

    # Check idle timeout
    if now - _naive_utc(session.last_used_at) > _idle_timeout():
        _revoke(session, "Idle timeout", now)
        db.session.commit()
        return None

    user = session.user
    if not user or not user.is_active:
        _revoke(session, "User account deactivated", now)
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(
        user=user,
        session=session,
        role=session.role,
        tenant_id=user.id if session.role == ROLE_USER else None,
    )


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """Returns True if session was revoked, False if not found."""
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False
    ).first()

    if not session:
        return False

    _revoke(session, reason, utcnow())
    db.session.commit()
    return True


def revoke_all_user_sessions(user_id: int, reason: str = "Revoke all sessions") -> int:
    """Returns count of sessions revoked."""
    now = utcnow()

    sessions = db.session.query(SessionToken).filter_by(
        user_id=user_id,
        is_revoked=False
    ).all()

    for session in sessions:
        _revoke(session, reason, now)

    db.session.commit()
    return len(sessions)


def cleanup_expired_sessions(days: int = 30) -> int:
    """
    Delete expired and revoked sessions older than `days`.

    Returns count of sessions deleted. Run periodically
    (`flask maintenance cleanup-sessions`).
    """
    now = utcnow()
    cutoff = now - timedelta(days=days)

    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < now,
            SessionToken.is_revoked.is_(True)
        ),
        SessionToken.created_at < cutoff
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
