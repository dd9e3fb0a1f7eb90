from __future__ import annotations
from typing import Dict, Optional


# backend error strings -> client error codes
SERVER_ERROR_CODES: Dict[str, str] = {
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "USER_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "INVALID_EMAIL": "auth/invalid-email",
    "MISSING_PASSWORD": "auth/missing-password",
    "USER_DISABLED": "auth/user-disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "TOKEN_EXPIRED": "auth/user-token-expired",
    "INVALID_REFRESH_TOKEN": "auth/invalid-user-token",
    "INVALID_GRANT_TYPE": "auth/invalid-user-token",
    "MISSING_REFRESH_TOKEN": "auth/invalid-user-token",
    "INVALID_API_KEY": "auth/invalid-api-key",
}

INTERNAL_ERROR = "auth/internal-error"
NETWORK_REQUEST_FAILED = "auth/network-request-failed"


class AuthError(Exception):
    def __init__(
        self,
        code: str,
        message: Optional[str] = None,
        server_message: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message or code
        self.server_message = server_message
        super().__init__(f"{self.message} ({code})" if message else code)


def from_server_message(msg: Optional[str]) -> AuthError:
    """
    turn the error string the REST backend puts in error.message into
    an AuthError.

    "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account..." is split on
    " : " so the left side picks the code and the right side is kept as detail
    """
    raw = (msg or "").strip()
    key, _, detail = raw.partition(" : ")
    key = key.strip()

    if key.startswith("API key not valid"):
        code = "auth/invalid-api-key"
    else:
        code = SERVER_ERROR_CODES.get(key, INTERNAL_ERROR)

    return AuthError(code, detail.strip() or None, server_message=raw or None)
