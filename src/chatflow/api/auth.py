"""Keycloak authentication using fastapi-keycloak-middleware.

HTTP requests are authenticated by the middleware; chat WebSockets pass
their JWT as a query parameter and are validated against the realm JWKS.
With ``AUTH_AUTH_ENABLED=false`` the user id is taken from a plain header
(HTTP) or the token value itself (WebSocket) for local runs.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi_keycloak_middleware import (
    KeycloakConfiguration,
    get_user,
    setup_keycloak_middleware,
)
from jwcrypto import jwt
from jwcrypto.common import JWException
from jwcrypto.jwk import JWKSet

from chatflow.config import get_auth_settings

from .exceptions import AuthenticationError

logger = structlog.get_logger()

PUBLIC_PATHS = ["/health", "/ready", "/docs", "/redoc", "/openapi.json"]


async def user_mapper(userinfo: dict[str, Any]) -> str:
    """Extract user_id (sub claim) from token.

    Args:
        userinfo: Token claims dictionary

    Returns:
        User ID string (sub claim)
    """
    return str(userinfo.get("sub", ""))


def get_keycloak_config() -> KeycloakConfiguration:
    """Get Keycloak middleware configuration.

    Returns:
        KeycloakConfiguration for middleware setup
    """
    settings = get_auth_settings()
    return KeycloakConfiguration(
        url=settings.keycloak_url,
        realm=settings.keycloak_realm,
        client_id=settings.keycloak_client_id,
        client_secret=settings.keycloak_client_secret,
        claims=["sub"],
        reject_on_missing_claim=False,
    )


def setup_auth(app: FastAPI) -> None:
    """Install the Keycloak middleware unless authentication is disabled.

    WebSocket routes authenticate themselves and are excluded.

    Args:
        app: FastAPI application
    """
    settings = get_auth_settings()
    if not settings.auth_enabled:
        logger.warning("auth_disabled")
        return

    setup_keycloak_middleware(
        app,
        keycloak_configuration=get_keycloak_config(),
        user_mapper=user_mapper,
        exclude_patterns=[*PUBLIC_PATHS, r".*/ws$"],
    )


async def get_current_user_id(request: Request) -> str:
    """Get current authenticated user's ID from request.

    Args:
        request: FastAPI request object

    Returns:
        User ID string

    Raises:
        AuthenticationError: If user is not authenticated
    """
    settings = get_auth_settings()
    if not settings.auth_enabled:
        user_id = request.headers.get(settings.dev_user_header)
    else:
        user_id = await get_user(request)

    if not user_id:
        raise AuthenticationError()
    return str(user_id)


async def authenticate_websocket(token: str) -> str:
    """Authenticate WebSocket with token.

    Args:
        token: JWT token string

    Returns:
        User ID from token

    Raises:
        AuthenticationError: If token is invalid
    """
    settings = get_auth_settings()
    if not settings.auth_enabled:
        return token

    try:
        async with httpx.AsyncClient() as client:
            jwks_url = (
                f"{settings.keycloak_url}/realms/{settings.keycloak_realm}"
                "/protocol/openid-connect/certs"
            )
            response = await client.get(jwks_url)
            response.raise_for_status()
            jwks = JWKSet.from_json(response.text)

        decoded = jwt.JWT(key=jwks, jwt=token)
        claims = json.loads(decoded.claims)
    except (httpx.HTTPError, JWException, ValueError) as e:
        logger.warning("ws_token_invalid", error=str(e))
        raise AuthenticationError("Invalid token", detail=str(e)) from e

    user_id = str(claims.get("sub", ""))
    if not user_id:
        raise AuthenticationError("Invalid token", detail="Token has no subject")
    return user_id
