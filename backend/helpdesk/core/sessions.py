# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Server-side sessions.

The browser only ever holds an opaque random token, wrapped in an HS256 JWT
signed with ``SESSION_SECRET`` so forged or truncated cookies are rejected
before the store is queried.  The authenticated user id lives in the session
table (``SESSION_TABLE``), which keeps sessions alive across process
restarts.

Lifetime is fixed at creation (``SESSION_TTL_SECONDS``); activity does not
extend it.

Login must go through :meth:`SessionManager.regenerate` so that whatever
token the client presented before authenticating is thrown away (session
fixation).
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from sqlalchemy.orm import Session

from helpdesk.core.config import Settings
from helpdesk.core.logger import logger
from helpdesk.models.session import session_model


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Cookie signing  (PyJWT / HS256)
# ---------------------------------------------------------------------------


def sign(token: str, secret: str) -> str:
    """Cookie value for *token*: a JWT whose ``sid`` claim is the token."""
    return _jwt.encode({"sid": token}, secret, algorithm="HS256")


def unsign(value: Optional[str], secret: str) -> Optional[str]:
    """Return the token inside a signed cookie value, or None if it is forged."""
    if not value:
        return None
    try:
        claims = _jwt.decode(value, secret, algorithms=["HS256"])
    except _jwt.InvalidTokenError:
        return None
    token = claims.get("sid")
    if not isinstance(token, str) or not token:
        return None
    return token


def cookie_options(settings: Settings) -> dict:
    """
    Keyword arguments for ``Response.set_cookie``.

    ``SameSite=None`` is needed for cross-origin credentialed requests and
    browsers only accept it together with ``Secure``.
    """
    same_site = "none" if settings.cors_enabled else "lax"
    secure = settings.is_production or settings.cookie_secure or same_site == "none"
    return {
        "max_age": settings.session_ttl_seconds,
        "path": "/",
        "httponly": True,
        "secure": secure,
        "samesite": same_site,
    }


# ---------------------------------------------------------------------------
# Session store
# ---------------------------------------------------------------------------


class SessionManager:
    """Create, resolve, rotate and destroy server-side sessions."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.model = session_model(settings.session_table)

    def _cookie_metadata(self, expires_at: datetime) -> dict:
        opts = cookie_options(self.settings)
        return {
            "name": self.settings.session_cookie_name,
            "expires": expires_at.isoformat(),
            "originalMaxAge": opts["max_age"],
            "httpOnly": opts["httponly"],
            "secure": opts["secure"],
            "sameSite": opts["samesite"],
            "path": opts["path"],
        }

    def create(self, user_id: Optional[int]) -> str:
        """Persist a new session for *user_id* and return its raw token."""
        self.purge_expired()

        token = secrets.token_urlsafe(32)
        expires_at = _now() + timedelta(seconds=self.settings.session_ttl_seconds)
        self.db.add(
            self.model(
                sid=token,
                user_id=user_id,
                data={"cookie": self._cookie_metadata(expires_at)},
                expires_at=expires_at,
            )
        )
        self.db.commit()
        return token

    def lookup(self, token: Optional[str]) -> Optional[int]:
        """
        Resolve *token* to the authenticated user id.

        Unknown, expired and anonymous sessions all resolve to None.  An
        expired record found this way is deleted.
        """
        if not token:
            return None
        model = self.model
        now = _now()
        record = (
            self.db.query(model)
            .filter(model.sid == token, model.expires_at > now)
            .first()
        )
        if record is not None:
            return record.user_id

        # Expiry is compared in SQL; SQLite hands datetimes back naive
        removed = (
            self.db.query(model)
            .filter(model.sid == token, model.expires_at <= now)
            .delete(synchronize_session=False)
        )
        if removed:
            self.db.commit()
        return None

    def destroy(self, token: Optional[str]) -> None:
        if not token:
            return
        self.db.query(self.model).filter(self.model.sid == token).delete(
            synchronize_session=False
        )
        self.db.commit()

    def regenerate(self, old_token: Optional[str], user_id: int) -> str:
        """Drop the pre-login session (if any) and issue a fresh one."""
        self.destroy(old_token)
        return self.create(user_id)

    def purge_expired(self) -> int:
        removed = (
            self.db.query(self.model)
            .filter(self.model.expires_at <= _now())
            .delete(synchronize_session=False)
        )
        if removed:
            self.db.commit()
            logger.info("Purged %d expired session(s)", removed)
        return removed
