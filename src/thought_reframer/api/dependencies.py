"""Request-scoped dependencies shared by the routers."""

from uuid import UUID

from fastapi import Header, HTTPException, status


async def require_owner(x_user_id: UUID | None = Header(default=None)) -> UUID:
    """Return the caller id set by the upstream auth layer."""
    if x_user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_user_id
