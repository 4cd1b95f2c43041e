"""Identity provider: bearer token to authenticated account."""

from viewings.errors import AuthError
from viewings.identity.tokens import decode_access_token
from viewings.models.identity import Identity
from viewings.repositories.user_repo import UserRepository


class IdentityProvider:
    """Authenticates callers and exposes account lookups.

    The meeting workflow trusts the returned role for admin gating and the
    returned name/email as the requester's contact details.
    """

    def __init__(self, users: UserRepository):
        self._users = users

    async def authenticate(self, credential: str | None) -> Identity:
        """Resolve an Authorization header value to an account.

        Args:
            credential: Raw header value, e.g. "Bearer <token>"

        Raises:
            AuthError: Missing/invalid token or unknown account
        """
        if not credential:
            raise AuthError("Authentication required")
        token = credential.removeprefix("Bearer ").strip()
        if not token:
            raise AuthError("Authentication required")

        user_id = decode_access_token(token)
        identity = await self._users.get_by_id(user_id)
        if identity is None:
            raise AuthError("User not found")
        return identity

    async def get_by_id(self, user_id: str) -> Identity | None:
        return await self._users.get_by_id(user_id)

    async def list_admins(self) -> list[Identity]:
        return await self._users.list_admins()
