"""
Pydantic schemas for the auth module.
"""

from pydantic import BaseModel


class TokenClaims(BaseModel):
    """Claims carried by a user token."""
    user_id: str
    exp: int
