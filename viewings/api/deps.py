"""FastAPI dependencies: services from app state and the calling identity."""

from fastapi import Depends, HTTPException, Request

from viewings.errors import ForbiddenError
from viewings.identity.provider import IdentityProvider
from viewings.models.identity import Identity
from viewings.scheduling.service import MeetingService


def get_meeting_service(request: Request) -> MeetingService:
    """Get MeetingService from app state."""
    if not hasattr(request.app.state, "meeting_service"):
        raise HTTPException(status_code=500, detail="MeetingService not initialized")
    return request.app.state.meeting_service


def get_identity_provider(request: Request) -> IdentityProvider:
    """Get IdentityProvider from app state."""
    if not hasattr(request.app.state, "identity_provider"):
        raise HTTPException(status_code=500, detail="IdentityProvider not initialized")
    return request.app.state.identity_provider


async def get_current_user(
    request: Request,
    identities: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    """Authenticate the caller from the Authorization header.

    Raises:
        AuthError: Missing or invalid bearer token (mapped to 401)
    """
    return await identities.authenticate(request.headers.get("Authorization"))


async def require_admin(user: Identity = Depends(get_current_user)) -> Identity:
    """Allow only admin callers.

    Raises:
        ForbiddenError: Caller is not an admin (mapped to 403)
    """
    if not user.is_admin:
        raise ForbiddenError("Access denied. Admin privileges required.")
    return user
