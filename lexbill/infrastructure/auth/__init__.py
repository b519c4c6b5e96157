"""
Authentication infrastructure.
"""

from .dependencies import get_current_user_id, USER_ID_HEADER

__all__ = [
    "get_current_user_id",
    "USER_ID_HEADER",
]
