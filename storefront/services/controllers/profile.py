"""Profile screen: load, edit and save the signed-in user's profile."""

from __future__ import annotations

import logging

from storefront.errors import error_message
from storefront.models.account import ProfileState, Session
from storefront.services.clients.identity_client import IdentityClient, ProfileStore
from storefront.services.clients.location_client import LocationService

logger = logging.getLogger(__name__)


class ProfileController:
    """Profile CRUD state bound to one explicit session."""

    def __init__(
        self,
        session: Session | None,
        identity: IdentityClient,
        profiles: ProfileStore,
        location: LocationService | None = None,
    ) -> None:
        self._session = session
        self._identity = identity
        self._profiles = profiles
        self._location = location
        self._pending_picture: tuple[bytes, str] | None = None
        self.state = ProfileState()

    async def load(self) -> ProfileState:
        self._update(is_loading=True)
        try:
            session = await self._identity.require_session(self._session)
            profile = await self._profiles.read_profile(session.uid)
            if profile is None:
                raise LookupError("Profile data not found")
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._update(
                error=error_message(exc, "Failed to load profile"),
                is_loading=False,
            )
            return self.state

        self._update(
            name=profile.name,
            email=session.email,
            phone=profile.phone,
            address=profile.address,
            profile_picture_url=profile.profile_picture or None,
            is_loading=False,
        )
        return self.state

    def start_editing(self) -> None:
        self._update(is_editing=True)

    def update_fields(
        self,
        *,
        name: str | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> None:
        changes = {"name": name, "phone": phone, "address": address}
        self._update(**{k: v for k, v in changes.items() if v is not None})

    def set_profile_picture(self, data: bytes, content_type: str) -> None:
        """Stage a picture; it is uploaded on the next save."""

        self._pending_picture = (data, content_type)

    def clear_error(self) -> None:
        self._update(error=None)

    async def save_changes(self) -> ProfileState:
        self._update(is_loading=True)
        try:
            session = await self._identity.require_session(self._session)
            fields = {
                "name": self.state.name,
                "phone": self.state.phone,
                "address": self.state.address,
            }
            if self._pending_picture is not None:
                data, content_type = self._pending_picture
                fields["profile_picture"] = await self._profiles.upload_picture(
                    session.uid, data, content_type
                )
            await self._profiles.write_profile(session.uid, fields)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("Failed to save profile: %s", exc)
            self._update(
                error=error_message(exc, "Failed to save changes"),
                is_loading=False,
            )
            return self.state

        self._pending_picture = None
        self._update(is_editing=False, is_loading=False)
        return await self.load()

    async def use_current_location(self) -> None:
        if self._location is None or not self._location.has_permission():
            self._update(error="Location permission not granted")
            return

        self._update(is_loading_location=True)
        try:
            address = await self._location.lookup_address()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._update(
                error=error_message(exc, "Error getting location"),
                is_loading_location=False,
            )
            return

        self._update(address=address, is_loading_location=False)

    async def sign_out(self) -> None:
        if self._session is not None:
            await self._identity.sign_out(self._session)
            self._session = None

    def _update(self, **changes) -> None:
        self.state = self.state.model_copy(update=changes)
