"""Identity: token verification and account lookups."""

from viewings.identity.provider import IdentityProvider
from viewings.identity.tokens import create_access_token, decode_access_token

__all__ = [
    "IdentityProvider",
    "create_access_token",
    "decode_access_token",
]
