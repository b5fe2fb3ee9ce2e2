# tandem/twin/core/auth/errors.py
from __future__ import annotations

from typing import Any


class TokenRefreshError(Exception):
    """The identity provider could not issue a token.

    ``details`` carries the provider's error payload when it sent one,
    otherwise the message of the underlying exception.
    """

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details if details is not None else message
