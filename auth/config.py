"""
Configuration for the auth module.

Signing secret and token lifetime are not read here: they live in the app's
`Settings` and are passed in by the caller. This module only holds the fixed
protocol details.
"""

# Header (and cookie) carrying the signed token, in both directions.
AUTH_HEADER = "Authorization"
AUTH_COOKIE = "Authorization"

# Signing algorithm for issued tokens.
ALGORITHM = "HS256"
