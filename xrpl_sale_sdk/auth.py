"""Credential handling for the XRPL.Sale SDK."""

from __future__ import annotations

from typing import Dict, Optional


class AuthState:
    """Holds the optional bearer token obtained from wallet authentication.

    Replacing the token is a plain assignment. A request that already read
    the previous token completes with it.
    """

    def __init__(self, token: Optional[str] = None) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None


def build_auth_headers(api_key: str, token: Optional[str] = None) -> Dict[str, str]:
    """Return exactly one credential header.

    Precedence: bearer token > X-API-Key.
    """
    if token:
        return {"Authorization": f"Bearer {token}"}
    return {"X-API-Key": api_key}
