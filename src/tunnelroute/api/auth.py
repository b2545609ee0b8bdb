"""Operator authorization for the tunnel API."""

from __future__ import annotations

import secrets

import structlog
from fastapi import Depends, Header, HTTPException

from tunnelroute.core.models.config import Settings

logger = structlog.get_logger(__name__)


def _get_settings() -> Settings:
    """Get settings with late import to avoid circular dependency."""
    from tunnelroute.api.app import get_settings

    return get_settings()


def _presented_token(authorization: str | None, x_operator_token: str | None) -> str | None:
    if x_operator_token:
        return x_operator_token
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return None


async def require_operator(
    authorization: str | None = Header(default=None),
    x_operator_token: str | None = Header(default=None),
    settings: Settings = Depends(_get_settings),
) -> None:
    """Reject callers that do not present the operator token.

    Runs before any route body, so no probe is started for them.
    """
    expected = settings.operator_token
    presented = _presented_token(authorization, x_operator_token)

    if not expected or presented is None or not secrets.compare_digest(
        presented.encode(), expected.encode()
    ):
        logger.warning("Rejected unauthorized operator request")
        raise HTTPException(status_code=403, detail="Unauthorized")
