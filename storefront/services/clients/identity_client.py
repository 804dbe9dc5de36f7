"""Identity, profile document and profile picture collaborators."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import os
import secrets
import uuid
from abc import ABC, abstractmethod
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from storefront.config import settings
from storefront.errors import AuthenticationError
from storefront.models.account import Session, UserProfile
from storefront.services.storage.redis_client import get_redis_client

logger = logging.getLogger(__name__)

_PBKDF2_ROUNDS = 120_000


class IdentityClient(ABC):
    """Abstract email/password identity provider issuing explicit sessions."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """Return a new session or raise ``AuthenticationError``."""

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Session:
        """Create the account and return its first session."""

    @abstractmethod
    async def sign_out(self, session: Session) -> None:
        """Revoke the session."""

    @abstractmethod
    async def current_user(self, token: str | None) -> Session | None:
        """Return the live session for ``token`` if any."""

    async def require_session(self, session: Session | None) -> Session:
        """Return ``session`` if it is still live, else raise."""

        if session is None:
            raise AuthenticationError("User not found")
        live = await self.current_user(session.token)
        if live is None or live.uid != session.uid:
            raise AuthenticationError("Session expired, please sign in again")
        return live


class ProfileStore(ABC):
    """Abstract per-user profile document and picture storage."""

    @abstractmethod
    async def read_profile(self, uid: str) -> UserProfile | None:
        """Return the profile document or None when missing."""

    @abstractmethod
    async def write_profile(self, uid: str, fields: dict[str, str]) -> None:
        """Merge ``fields`` into the profile document."""

    @abstractmethod
    async def upload_picture(self, uid: str, data: bytes, content_type: str) -> str:
        """Store the picture and return its download URL."""

    @abstractmethod
    async def download_picture(self, uid: str) -> tuple[bytes, str] | None:
        """Return ``(data, content_type)`` or None."""


def _hash_password(password: str, salt: bytes) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, _PBKDF2_ROUNDS)
    return digest.hex()


class RedisIdentityClient(IdentityClient):
    """Identity provider keeping accounts and sessions in Redis."""

    def __init__(self, client: redis.Redis, session_ttl: int | None = None):
        self._client = client
        self._ttl = session_ttl or settings.SESSION_TTL_SECONDS

    @staticmethod
    def _user_key(email: str) -> str:
        return f"auth:users:{email.strip().lower()}"

    @staticmethod
    def _session_key(token: str) -> str:
        return f"auth:sessions:{token}"

    async def sign_in(self, email: str, password: str) -> Session:
        raw = await self._client.get(self._user_key(email))
        if not raw:
            raise AuthenticationError("No account found for this email")
        record = json.loads(raw)
        expected = record["password_hash"]
        actual = _hash_password(password, bytes.fromhex(record["salt"]))
        if not hmac.compare_digest(expected, actual):
            raise AuthenticationError("The password is invalid")
        return await self._open_session(record["uid"], record["email"])

    async def sign_up(self, email: str, password: str) -> Session:
        salt = os.urandom(16)
        record = {
            "uid": uuid.uuid4().hex,
            "email": email.strip(),
            "salt": salt.hex(),
            "password_hash": _hash_password(password, salt),
        }
        created = await self._client.set(
            self._user_key(email),
            json.dumps(record),
            nx=True,
        )
        if not created:
            raise AuthenticationError("The email address is already in use")

        await RedisProfileStore(self._client).write_profile(
            record["uid"],
            {"email": record["email"]},
        )
        logger.info("Created account %s", record["uid"])
        return await self._open_session(record["uid"], record["email"])

    async def sign_out(self, session: Session) -> None:
        await self._client.delete(self._session_key(session.token))
        logger.info("Signed out %s", session.uid)

    async def current_user(self, token: str | None) -> Session | None:
        if not token:
            return None
        raw = await self._client.get(self._session_key(token))
        if not raw:
            return None
        return Session.model_validate_json(raw)

    async def _open_session(self, uid: str, email: str) -> Session:
        session = Session(token=secrets.token_urlsafe(32), uid=uid, email=email)
        await self._client.set(
            self._session_key(session.token),
            session.model_dump_json(),
            ex=self._ttl,
        )
        logger.info("Opened session for %s", uid)
        return session


class RedisProfileStore(ProfileStore):
    """Profile documents as Redis hashes, pictures as base64 blobs."""

    _PROFILE_FIELDS = ("name", "phone", "address", "profile_picture")

    def __init__(self, client: redis.Redis):
        self._client = client

    @staticmethod
    def _profile_key(uid: str) -> str:
        return f"users:{uid}"

    @staticmethod
    def _picture_key(uid: str) -> str:
        return f"profile_pictures:{uid}"

    async def read_profile(self, uid: str) -> UserProfile | None:
        data = await self._client.hgetall(self._profile_key(uid))
        if not data:
            return None
        return UserProfile(
            **{field: data[field] for field in self._PROFILE_FIELDS if field in data}
        )

    async def write_profile(self, uid: str, fields: dict[str, str]) -> None:
        if not fields:
            return
        await self._client.hset(self._profile_key(uid), mapping=fields)

    async def upload_picture(self, uid: str, data: bytes, content_type: str) -> str:
        await self._client.hset(
            self._picture_key(uid),
            mapping={
                "content_type": content_type,
                "data": base64.b64encode(data).decode("ascii"),
            },
        )
        logger.info("Stored profile picture for %s (%d bytes)", uid, len(data))
        return f"/profile/picture/{uid}"

    async def download_picture(self, uid: str) -> tuple[bytes, str] | None:
        stored = await self._client.hgetall(self._picture_key(uid))
        if not stored:
            return None
        return base64.b64decode(stored["data"]), stored["content_type"]


def get_identity_client() -> IdentityClient:
    """FastAPI dependency factory."""

    return RedisIdentityClient(get_redis_client())


def get_profile_store() -> ProfileStore:
    """FastAPI dependency factory."""

    return RedisProfileStore(get_redis_client())


IdentityDependency = Annotated[IdentityClient, Depends(get_identity_client)]
ProfileStoreDependency = Annotated[ProfileStore, Depends(get_profile_store)]
