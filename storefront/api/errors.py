"""Translation of catalog failures into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException, status

from storefront.errors import NotFoundError, error_message


def catalog_http_error(exc: Exception | None, fallback: str) -> HTTPException:
    """Return 404 for a missing resource and 502 for any other catalog failure."""

    if exc is None or isinstance(exc, NotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_message(exc, fallback) if exc is not None else fallback,
        )
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=error_message(exc, fallback),
    )
