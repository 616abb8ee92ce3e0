"""
FastAPI wiring for user tokens.

`user_token_middleware` runs on every request: it resolves (or issues) the
user token, stores the user id on `request.state`, and echoes the token in
the `Authorization` response header. Routes read the user id through the
`get_current_user` dependency.
"""

import logging

from fastapi import Request

from .config import AUTH_COOKIE, AUTH_HEADER
from .service import resolve_user

log = logging.getLogger("shortener.auth")


async def user_token_middleware(request: Request, call_next):
    settings = request.app.state.settings
    user_id, token, issued = resolve_user(
        request.headers.get(AUTH_HEADER, ""),
        request.cookies.get(AUTH_COOKIE, ""),
        settings.secret_key,
        settings.token_ttl,
    )
    if issued:
        log.info("user ID generated: %s", user_id)
    request.state.user_id = user_id

    response = await call_next(request)
    response.headers[AUTH_HEADER] = token
    return response


def get_current_user(request: Request) -> str:
    """
    Dependency returning the current user id.

    Returns:
        str: The user id resolved by `user_token_middleware`.
    """
    return request.state.user_id
