"""
Credentials of the signed-in user as seen by the conversation client.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional


@dataclass
class Credentials:
    user_id: str
    access_token: str


# Returns None when nobody is signed in
CredentialProvider = Callable[[], Awaitable[Optional[Credentials]]]


def static_credentials(user_id: str, access_token: str) -> CredentialProvider:
    """Credential provider that always returns the same credentials."""
    credentials = Credentials(user_id=user_id, access_token=access_token)

    async def provider() -> Optional[Credentials]:
        return credentials

    return provider
