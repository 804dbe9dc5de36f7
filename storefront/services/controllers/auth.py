"""Sign-in / sign-up form handling and start-screen routing."""

from __future__ import annotations

import logging
import re
from typing import Literal

from storefront.errors import error_message
from storefront.models.account import (
    AuthFailure,
    AuthForm,
    AuthInitial,
    AuthLoading,
    AuthState,
    AuthSuccess,
)
from storefront.services.clients.identity_client import IdentityClient

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")
MIN_PASSWORD_LENGTH = 6


class AuthController:
    def __init__(self, identity: IdentityClient) -> None:
        self._identity = identity
        self.form = AuthForm()
        self.state: AuthState = AuthInitial()

    def set_email(self, email: str) -> None:
        self.form = self.form.model_copy(update={"email": email})

    def set_password(self, password: str) -> None:
        self.form = self.form.model_copy(update={"password": password})

    def set_confirm_password(self, confirm_password: str) -> None:
        self.form = self.form.model_copy(update={"confirm_password": confirm_password})

    def validate_sign_in(self) -> bool:
        email, password = self.form.email, self.form.password

        if not email:
            email_error = "Email is required"
        elif not EMAIL_PATTERN.match(email):
            email_error = "Invalid email"
        else:
            email_error = None

        if not password:
            password_error = "Password is required"
        elif len(password) < MIN_PASSWORD_LENGTH:
            password_error = "Password must be at least 6 characters"
        else:
            password_error = None

        self.form = self.form.model_copy(
            update={"email_error": email_error, "password_error": password_error}
        )
        return email_error is None and password_error is None

    def validate_sign_up(self) -> bool:
        basic = self.validate_sign_in()
        confirm_error = (
            "Passwords don't match"
            if self.form.password != self.form.confirm_password
            else None
        )
        self.form = self.form.model_copy(
            update={"confirm_password_error": confirm_error}
        )
        return basic and confirm_error is None

    async def sign_in(self) -> AuthState:
        if not self.validate_sign_in():
            return self.state
        self.state = AuthLoading()
        try:
            session = await self._identity.sign_in(self.form.email, self.form.password)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.info("Sign-in failed for %s: %s", self.form.email, exc)
            self.state = AuthFailure(message=error_message(exc, "Unknown error"))
            return self.state
        self.state = AuthSuccess(session=session)
        return self.state

    async def sign_up(self) -> AuthState:
        if not self.validate_sign_up():
            return self.state
        self.state = AuthLoading()
        try:
            session = await self._identity.sign_up(self.form.email, self.form.password)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.info("Sign-up failed for %s: %s", self.form.email, exc)
            self.state = AuthFailure(message=error_message(exc, "Unknown error"))
            return self.state
        self.state = AuthSuccess(session=session)
        return self.state


async def resolve_start_route(
    identity: IdentityClient,
    token: str | None,
) -> Literal["home", "auth"]:
    """Pick the first screen after the splash from the current session."""

    return "home" if await identity.current_user(token) is not None else "auth"
