"""Error taxonomy shared by clients, stores and controllers."""

from __future__ import annotations


class StorefrontError(Exception):
    """Base class for all storefront failures."""


class CatalogError(StorefrontError):
    """Failure talking to the product catalog."""


class NetworkError(CatalogError):
    """Transport or connectivity failure."""


class DecodeError(CatalogError):
    """The remote service answered with a malformed body."""


class NotFoundError(CatalogError):
    """The requested product, category or address does not exist."""


class PermissionDeniedError(StorefrontError):
    """A device permission (location, camera) was not granted."""


class FormValidationError(StorefrontError):
    """Local form checks failed."""

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class AuthenticationError(StorefrontError):
    """Credentials were rejected or the session is no longer valid."""


UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


def error_message(exc: BaseException, fallback: str = UNKNOWN_ERROR_MESSAGE) -> str:
    """Return a display-ready message for ``exc``."""

    return str(exc) or fallback
