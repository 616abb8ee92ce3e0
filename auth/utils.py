"""
Utility functions for the auth module.
"""

import time


def generate_user_id() -> str:
    """
    Return a new user id (current time in nanoseconds, as a string).

    Note:
        Unique enough for a single node; not meant to be unguessable.
    """
    return str(time.time_ns())
