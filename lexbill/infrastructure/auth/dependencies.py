"""
Caller identity dependencies for FastAPI.
Authentication happens in front of this service; requests carry the
authenticated user id in a header.
"""

from typing import Annotated, Optional
from fastapi import Header, HTTPException, status


USER_ID_HEADER = "X-User-Id"


async def get_current_user_id(
    x_user_id: Annotated[Optional[str], Header(alias=USER_ID_HEADER)] = None
) -> str:
    """
    FastAPI dependency to get the current user ID.

    Raises:
        HTTPException: If the identity header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {USER_ID_HEADER} header"
        )
    return x_user_id.strip()
