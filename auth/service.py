"""
Core token logic.

Builds HS256-signed tokens carrying a user id and an expiry, and reads the
user id back from a presented token.
"""

import time
from typing import Optional, Tuple

import jwt
from pydantic import ValidationError

from .config import ALGORITHM
from .schemas import TokenClaims
from .utils import generate_user_id


def build_token(user_id: str, secret: str, ttl: int) -> str:
    """
    Create a signed token for `user_id` that expires `ttl` seconds from now.

    Args:
        user_id (str): The user's id.
        secret (str): HMAC signing key.
        ttl (int): Lifetime in seconds.

    Returns:
        str: The encoded token.
    """
    claims = TokenClaims(user_id=user_id, exp=int(time.time()) + ttl)
    return jwt.encode(claims.model_dump(), secret, algorithm=ALGORITHM)


def read_user_id(token: str, secret: str) -> Optional[str]:
    """
    Return the user id carried by `token`, or None when the token is missing,
    expired, tampered with, or signed with another algorithm.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
        claims = TokenClaims.model_validate(payload)
    except (jwt.InvalidTokenError, ValidationError):
        return None
    return claims.user_id or None


def resolve_user(header_token: str, cookie_token: str, secret: str, ttl: int) -> Tuple[str, str, bool]:
    """
    Pick the user for a request.

    The header token wins over the cookie token. When neither carries a valid
    user id, a new user is created and a fresh token issued.

    Returns:
        tuple: (user_id, token, issued) where `token` is the one to send back
        and `issued` tells whether it was created for this request.
    """
    for token in (header_token, cookie_token):
        user_id = read_user_id(token, secret)
        if user_id:
            return user_id, token, False

    user_id = generate_user_id()
    return user_id, build_token(user_id, secret, ttl), True
