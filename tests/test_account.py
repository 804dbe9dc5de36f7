"""Tests for authentication, sessions and the profile controller."""

from __future__ import annotations

import pytest
from conftest import StubLocationService

from storefront.errors import AuthenticationError
from storefront.models.account import AuthFailure, AuthInitial, AuthSuccess
from storefront.models.location import Coordinates
from storefront.services.controllers.auth import AuthController, resolve_start_route
from storefront.services.controllers.profile import ProfileController


async def _signed_up(identity, email="ada@example.com", password="secret123"):
    return await identity.sign_up(email, password)


def test_sign_in_validation_messages(identity):
    controller = AuthController(identity)

    assert not controller.validate_sign_in()
    assert controller.form.email_error == "Email is required"
    assert controller.form.password_error == "Password is required"

    controller.set_email("not-an-email")
    controller.set_password("abc")
    assert not controller.validate_sign_in()
    assert controller.form.email_error == "Invalid email"
    assert controller.form.password_error == "Password must be at least 6 characters"


def test_sign_up_requires_matching_confirmation(identity):
    controller = AuthController(identity)
    controller.set_email("ada@example.com")
    controller.set_password("secret123")
    controller.set_confirm_password("secret124")

    assert not controller.validate_sign_up()
    assert controller.form.confirm_password_error == "Passwords don't match"


@pytest.mark.asyncio
async def test_invalid_form_skips_identity_call(identity):
    controller = AuthController(identity)
    controller.set_email("bad")

    state = await controller.sign_in()

    assert state == AuthInitial()


@pytest.mark.asyncio
async def test_sign_up_then_sign_in(identity):
    controller = AuthController(identity)
    controller.set_email("ada@example.com")
    controller.set_password("secret123")
    controller.set_confirm_password("secret123")

    signed_up = await controller.sign_up()
    assert isinstance(signed_up, AuthSuccess)

    again = AuthController(identity)
    again.set_email("ada@example.com")
    again.set_password("secret123")
    signed_in = await again.sign_in()

    assert isinstance(signed_in, AuthSuccess)
    assert signed_in.session.uid == signed_up.session.uid
    assert signed_in.session.token != signed_up.session.token


@pytest.mark.asyncio
async def test_wrong_password_is_reported(identity):
    await _signed_up(identity)
    controller = AuthController(identity)
    controller.set_email("ada@example.com")
    controller.set_password("wrong-password")

    state = await controller.sign_in()

    assert state == AuthFailure(message="The password is invalid")


@pytest.mark.asyncio
async def test_duplicate_sign_up_is_rejected(identity):
    await _signed_up(identity)

    with pytest.raises(AuthenticationError):
        await _signed_up(identity)


@pytest.mark.asyncio
async def test_start_route_follows_session(identity):
    session = await _signed_up(identity)

    assert await resolve_start_route(identity, session.token) == "home"
    assert await resolve_start_route(identity, None) == "auth"

    await identity.sign_out(session)
    assert await resolve_start_route(identity, session.token) == "auth"


@pytest.mark.asyncio
async def test_profile_load_and_save(identity, profiles):
    session = await _signed_up(identity)
    controller = ProfileController(session, identity, profiles)

    state = await controller.load()
    assert state.email == "ada@example.com"
    assert state.name == ""

    controller.start_editing()
    controller.update_fields(name="Ada Lovelace", phone="0123")
    controller.set_profile_picture(b"\x89PNG-bytes", "image/png")
    state = await controller.save_changes()

    assert state.error is None
    assert not state.is_editing
    assert state.name == "Ada Lovelace"
    assert state.phone == "0123"
    assert state.profile_picture_url == f"/profile/picture/{session.uid}"
    stored = await profiles.download_picture(session.uid)
    assert stored == (b"\x89PNG-bytes", "image/png")


@pytest.mark.asyncio
async def test_profile_missing_document(identity, profiles, redis_client):
    session = await _signed_up(identity)
    await redis_client.delete(f"users:{session.uid}")

    state = await ProfileController(session, identity, profiles).load()

    assert state.error == "Profile data not found"
    assert not state.is_loading


@pytest.mark.asyncio
async def test_revoked_session_cannot_save(identity, profiles):
    session = await _signed_up(identity)
    controller = ProfileController(session, identity, profiles)
    await controller.load()

    await controller.sign_out()
    stale = ProfileController(session, identity, profiles)
    state = await stale.save_changes()

    assert state.error == "Session expired, please sign in again"


@pytest.mark.asyncio
async def test_profile_address_from_location(identity, profiles):
    session = await _signed_up(identity)
    controller = ProfileController(
        session,
        identity,
        profiles,
        StubLocationService(Coordinates(latitude=51.5, longitude=-0.15)),
    )
    await controller.load()

    await controller.use_current_location()
    assert controller.state.address == "221B Baker Street, London"

    controller.clear_error()
    assert controller.state.error is None
