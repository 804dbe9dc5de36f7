"""Identity, session and profile schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class Session(BaseModel):
    """Explicit identity token handed to every controller that needs a user."""

    token: str
    uid: str
    email: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class UserProfile(BaseModel):
    """Profile document stored per user id."""

    name: str = ""
    phone: str = ""
    address: str = ""
    profile_picture: str = ""


class ProfileState(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    profile_picture_url: str | None = None
    is_editing: bool = False
    is_loading: bool = False
    is_loading_location: bool = False
    error: str | None = None


class ProfileUpdateRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None


class AuthInitial(BaseModel):
    status: Literal["initial"] = "initial"


class AuthLoading(BaseModel):
    status: Literal["loading"] = "loading"


class AuthSuccess(BaseModel):
    status: Literal["success"] = "success"
    session: Session


class AuthFailure(BaseModel):
    status: Literal["error"] = "error"
    message: str


AuthState = Annotated[
    AuthInitial | AuthLoading | AuthSuccess | AuthFailure,
    Field(discriminator="status"),
]


class AuthForm(BaseModel):
    """Sign-in / sign-up form fields and their validation messages."""

    email: str = ""
    password: str = ""
    confirm_password: str = ""
    email_error: str | None = None
    password_error: str | None = None
    confirm_password_error: str | None = None


class CredentialsRequest(BaseModel):
    email: str = ""
    password: str = ""
    confirm_password: str | None = None


class StartRouteResponse(BaseModel):
    route: Literal["home", "auth"]
