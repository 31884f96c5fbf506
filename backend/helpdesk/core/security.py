# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Central security module.  Password handling and the auth guards live here.
No other module should touch raw password hashes directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256, bcrypt)
2. Credential check for the login flow      (authenticate)
3. FastAPI dependency guards                (current_session_user, require_user)
4. Client address extraction                (get_client_ip)
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from passlib.context import CryptContext
from passlib.hash import pbkdf2_sha256 as _pbkdf2
from sqlalchemy.orm import Session

from helpdesk.core.config import Settings
from helpdesk.core.errors import InvalidCredentials, Unauthorized
from helpdesk.core.sessions import SessionManager, unsign
from helpdesk.database import get_db
from helpdesk.models.user import User

# ---------------------------------------------------------------------------
# 1.  Password hashing
# ---------------------------------------------------------------------------
# New hashes are pbkdf2_sha256 (pure Python, no binary wheel constraint).
# bcrypt hashes seeded by older deployments still verify when the optional
# ``bcrypt`` backend is installed.
# ---------------------------------------------------------------------------

_CONTEXT = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated=["bcrypt"])

DEFAULT_ROUNDS = 600_000


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash *plain* with PBKDF2-SHA256; the salt is embedded in the result."""
    return _pbkdf2.using(rounds=rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time check of *plain* against a stored hash.  A hash passlib does
    not recognise counts as a mismatch.
    """
    try:
        return _CONTEXT.verify(plain, stored_hash)
    except ValueError:
        return False


@lru_cache(maxsize=8)
def _dummy_hash(rounds: int) -> str:
    return hash_password("not-a-real-password", rounds)


# ---------------------------------------------------------------------------
# 2.  Login credential check
# ---------------------------------------------------------------------------


def authenticate(db: Session, username: str, password: str, rounds: int = DEFAULT_ROUNDS) -> User:
    """
    Return the user for a correct username/password pair.

    Unknown user and wrong password raise the very same
    :class:`InvalidCredentials`; for an unknown user a dummy hash is still
    verified so the timing does not tell the two cases apart.
    """
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        verify_password(password, _dummy_hash(rounds))
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user


# ---------------------------------------------------------------------------
# 3.  FastAPI dependency guards
# ---------------------------------------------------------------------------


def app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_manager(
    settings: Settings = Depends(app_settings),
    db: Session = Depends(get_db),
) -> SessionManager:
    return SessionManager(db, settings)


def session_token(request: Request, settings: Settings = Depends(app_settings)) -> Optional[str]:
    """Raw session token from the signed cookie, or None."""
    return unsign(request.cookies.get(settings.session_cookie_name), settings.session_secret)


def current_session_user(
    token: Optional[str] = Depends(session_token),
    sessions: SessionManager = Depends(get_session_manager),
) -> Optional[int]:
    """Dependency: the authenticated user id, or None for anonymous callers."""
    return sessions.lookup(token)


def require_user(user_id: Optional[int] = Depends(current_session_user)) -> int:
    """
    Dependency: the Auth Gate in front of every ticket and upload route.
    Raises 401 unless the session carries an authenticated user id.
    """
    if user_id is None:
        raise Unauthorized()
    return user_id


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request, trust_proxy: bool = False) -> str:
    """
    Extract the client IP address from the request.
    Behind a trusted proxy the first X-Forwarded-For hop is the original
    client; otherwise the header is ignored since any caller can set it.
    """
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
