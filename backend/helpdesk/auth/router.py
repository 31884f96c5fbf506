# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – login, logout, current-session info.

Security notes
--------------
* Login returns the *same* error message whether the username doesn't exist
  or the password is wrong.  This prevents user-enumeration attacks.
* Login always rotates the session token: any cookie the client presented
  beforehand is destroyed server-side, so a planted token can never become
  an authenticated one (session fixation).
* Login attempts are throttled per client address before the password is
  checked.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from helpdesk.auth.schemas import LoginRequest, MeResponse, MessageResponse, UserInfo
from helpdesk.core.config import Settings
from helpdesk.core.errors import InvalidCredentials
from helpdesk.core.logger import logger
from helpdesk.core.security import (
    app_settings,
    authenticate,
    current_session_user,
    get_client_ip,
    get_session_manager,
    session_token,
)
from helpdesk.core.sessions import SessionManager, cookie_options, sign
from helpdesk.database import get_db
from helpdesk.models.user import User

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# GET /auth/me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=MeResponse, response_model_exclude_none=True)
def me(
    user_id: Optional[int] = Depends(current_session_user),
    db: Session = Depends(get_db),
):
    """Report whether the caller holds an authenticated session."""
    if user_id is None:
        return MeResponse(authenticated=False)
    user = db.get(User, user_id)
    if user is None:
        return MeResponse(authenticated=False)
    return MeResponse(authenticated=True, user=UserInfo.model_validate(user))


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=MessageResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    old_token: Optional[str] = Depends(session_token),
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(app_settings),
    db: Session = Depends(get_db),
):
    """Verify credentials and bind a freshly issued session to the user."""
    client_ip = get_client_ip(request, settings.trust_proxy)
    request.app.state.login_limiter.hit(client_ip)

    try:
        user = authenticate(db, body.username, body.password, settings.password_hash_rounds)
    except InvalidCredentials:
        logger.info("Login failed | client=%s", client_ip)
        raise

    token = sessions.regenerate(old_token, user.id)
    response.set_cookie(
        settings.session_cookie_name,
        sign(token, settings.session_secret),
        **cookie_options(settings),
    )
    logger.info("Login succeeded | user_id=%d client=%s", user.id, client_ip)
    return MessageResponse(message="Logged in")


# ---------------------------------------------------------------------------
# POST /auth/logout
# ---------------------------------------------------------------------------


@router.post("/logout", response_model=MessageResponse)
def logout(
    token: Optional[str] = Depends(session_token),
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(app_settings),
):
    """Destroy the server-side session and tell the browser to drop the cookie."""
    sessions.destroy(token)

    opts = cookie_options(settings)
    response = JSONResponse(MessageResponse(message="Logged out").model_dump())
    response.delete_cookie(
        settings.session_cookie_name,
        path=opts["path"],
        secure=opts["secure"],
        httponly=opts["httponly"],
        samesite=opts["samesite"],
    )
    return response
