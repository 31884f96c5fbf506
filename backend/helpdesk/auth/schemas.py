# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from typing import Annotated, Optional

from pydantic import BaseModel, StringConstraints


# -- Requests --------------------------------------------------------------


class LoginRequest(BaseModel):
    username: Annotated[str, StringConstraints(min_length=1, max_length=150)]
    password: Annotated[str, StringConstraints(min_length=1)]


# -- Responses -------------------------------------------------------------


class MessageResponse(BaseModel):
    message: str


class UserInfo(BaseModel):
    id: int
    username: str

    model_config = {"from_attributes": True}


class MeResponse(BaseModel):
    authenticated: bool
    user: Optional[UserInfo] = None
