# tandem/twin/core/auth/provider.py
from abc import ABC, abstractmethod

from tandem.twin.core.auth.models import TokenGrant


class TokenProvider(ABC):
    @abstractmethod
    async def get_token(self) -> TokenGrant:
        """
        Return a usable access token grant.
        Implementations must refresh when their cached token is near expiry
        and raise TokenRefreshError when the identity provider fails.
        """
        ...
