"""Principal extraction.

Authentication happens upstream (gateway or identity provider). By the time
a request reaches this service the caller's id and roles arrive as trusted
headers.
"""

import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from app.schemas.auth import AuthUser

logger = logging.getLogger(__name__)


async def get_current_user(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_roles: Annotated[str | None, Header()] = None,
) -> AuthUser:
    if not x_user_id or not x_user_id.strip():
        logger.warning("Authentication failed: missing X-User-Id header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )

    roles = [role.strip().lower() for role in (x_user_roles or "").split(",") if role.strip()]
    logger.debug("Principal resolved: user=%s, roles=%s", x_user_id, roles)
    return AuthUser(id=x_user_id.strip(), roles=roles)


CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
