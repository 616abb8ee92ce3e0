"""
Auth package for the Shortener Platform API.

Issues and verifies signed user tokens (HS256 JWT) so each client gets a
stable user id, which the API uses to stamp saved URLs and to list a user's
URLs. Kept separate from `shortener_platform` so it can be reused by other
FastAPI apps.
"""
