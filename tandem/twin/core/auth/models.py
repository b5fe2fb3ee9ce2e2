# tandem/twin/core/auth/models.py
from dataclasses import dataclass
import math
import time


@dataclass(frozen=True)
class AccessToken:
    """Cached client-credentials token with its absolute expiry (epoch seconds)."""

    access_token: str
    expires_at: float

    def is_valid(self, leeway: float = 300.0, now: float | None = None) -> bool:
        """
        Returns True while the token is more than `leeway` seconds from expiry.
        """
        now = time.time() if now is None else now
        return self.expires_at > now + leeway

    def remaining_seconds(self, now: float | None = None) -> int:
        now = time.time() if now is None else now
        return max(0, math.floor(self.expires_at - now))


@dataclass(frozen=True)
class TokenGrant:
    """What the token endpoint hands back to callers."""

    access_token: str
    expires_in: int

    def to_dict(self) -> dict:
        return {"access_token": self.access_token, "expires_in": self.expires_in}
