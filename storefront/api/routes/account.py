"""Routes for authentication and the signed-in user's profile."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status

from storefront.models.account import (
    AuthState,
    AuthSuccess,
    CredentialsRequest,
    ProfileState,
    ProfileUpdateRequest,
    Session,
    StartRouteResponse,
)
from storefront.models.location import Coordinates
from storefront.services.clients.identity_client import (
    IdentityDependency,
    ProfileStoreDependency,
)
from storefront.services.clients.location_client import LocationFactoryDependency
from storefront.services.controllers.auth import AuthController, resolve_start_route
from storefront.services.controllers.profile import ProfileController

logger = logging.getLogger(__name__)

router = APIRouter(tags=["account"])


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_session(
    identity: IdentityDependency,
    authorization: Annotated[str | None, Header()] = None,
) -> Session:
    """Resolve the bearer token to a live session or answer 401."""

    session = await identity.current_user(_bearer_token(authorization))
    if session is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return session


SessionDependency = Annotated[Session, Depends(get_session)]


def _auth_controller(identity, payload: CredentialsRequest) -> AuthController:
    controller = AuthController(identity)
    controller.set_email(payload.email)
    controller.set_password(payload.password)
    if payload.confirm_password is not None:
        controller.set_confirm_password(payload.confirm_password)
    return controller


def _auth_response(controller: AuthController, state: AuthState) -> AuthSuccess:
    form = controller.form
    field_errors = {
        name: message
        for name, message in (
            ("email", form.email_error),
            ("password", form.password_error),
            ("confirm_password", form.confirm_password_error),
        )
        if message
    }
    if field_errors:
        raise HTTPException(status_code=422, detail=field_errors)
    if state.status == "error":
        raise HTTPException(status_code=401, detail=state.message)
    return state


@router.post("/auth/sign-up", response_model=AuthSuccess, status_code=201)
async def sign_up(
    payload: CredentialsRequest,
    identity: IdentityDependency,
) -> AuthSuccess:
    controller = _auth_controller(identity, payload)
    if payload.confirm_password is None:
        controller.set_confirm_password(payload.password)
    return _auth_response(controller, await controller.sign_up())


@router.post("/auth/sign-in", response_model=AuthSuccess)
async def sign_in(
    payload: CredentialsRequest,
    identity: IdentityDependency,
) -> AuthSuccess:
    controller = _auth_controller(identity, payload)
    return _auth_response(controller, await controller.sign_in())


@router.post("/auth/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(session: SessionDependency, identity: IdentityDependency) -> None:
    await identity.sign_out(session)


@router.get("/auth/start-route", response_model=StartRouteResponse)
async def start_route(
    identity: IdentityDependency,
    authorization: Annotated[str | None, Header()] = None,
) -> StartRouteResponse:
    route = await resolve_start_route(identity, _bearer_token(authorization))
    return StartRouteResponse(route=route)


async def _loaded_profile(
    session: Session,
    identity,
    profiles,
    location=None,
) -> ProfileController:
    controller = ProfileController(session, identity, profiles, location)
    await controller.load()
    if controller.state.error:
        raise HTTPException(status_code=404, detail=controller.state.error)
    return controller


@router.get("/profile", response_model=ProfileState)
async def read_profile(
    session: SessionDependency,
    identity: IdentityDependency,
    profiles: ProfileStoreDependency,
) -> ProfileState:
    controller = await _loaded_profile(session, identity, profiles)
    return controller.state


@router.put("/profile", response_model=ProfileState)
async def update_profile(
    payload: ProfileUpdateRequest,
    session: SessionDependency,
    identity: IdentityDependency,
    profiles: ProfileStoreDependency,
    location_factory: LocationFactoryDependency,
    latitude: float | None = None,
    longitude: float | None = None,
) -> ProfileState:
    fix = None
    if latitude is not None and longitude is not None:
        fix = Coordinates(latitude=latitude, longitude=longitude)
    controller = await _loaded_profile(
        session, identity, profiles, location_factory(fix)
    )
    controller.start_editing()
    controller.update_fields(
        name=payload.name,
        phone=payload.phone,
        address=payload.address,
    )
    if payload.address is None and fix is not None:
        await controller.use_current_location()
        if controller.state.error:
            raise HTTPException(status_code=422, detail=controller.state.error)

    state = await controller.save_changes()
    if state.error:
        raise HTTPException(status_code=400, detail=state.error)
    return state


@router.put("/profile/picture", response_model=ProfileState)
async def upload_profile_picture(
    request: Request,
    session: SessionDependency,
    identity: IdentityDependency,
    profiles: ProfileStoreDependency,
) -> ProfileState:
    data = await request.body()
    if not data:
        raise HTTPException(status_code=422, detail="Empty picture upload")
    controller = await _loaded_profile(session, identity, profiles)
    controller.set_profile_picture(
        data,
        request.headers.get("content-type", "application/octet-stream"),
    )
    state = await controller.save_changes()
    if state.error:
        raise HTTPException(status_code=400, detail=state.error)
    return state


@router.get("/profile/picture/{uid}")
async def download_profile_picture(
    uid: str,
    profiles: ProfileStoreDependency,
) -> Response:
    stored = await profiles.download_picture(uid)
    if stored is None:
        raise HTTPException(status_code=404, detail="No profile picture")
    data, content_type = stored
    return Response(content=data, media_type=content_type)
