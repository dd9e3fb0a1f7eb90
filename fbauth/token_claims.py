from __future__ import annotations
import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fbauth.errors import AuthError


@dataclass
class IdTokenResult:
    token: str
    claims: Dict[str, Any]
    auth_time: Optional[datetime]
    issued_at_time: Optional[datetime]
    expiration_time: Optional[datetime]
    sign_in_provider: Optional[str]


def _b64url_decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _utc(seconds: Any) -> Optional[datetime]:
    if seconds is None:
        return None
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc)


def decode_claims(id_token: str) -> Dict[str, Any]:
    """
    read the payload of an ID token.
    signature is NOT checked, only for showing what a token carries
    malformed token -> AuthError
    """
    parts = (id_token or "").split(".")
    if len(parts) != 3:
        raise AuthError("auth/argument-error", "ID token is not a JWT")

    try:
        claims = json.loads(_b64url_decode(parts[1]))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise AuthError("auth/argument-error", f"bad ID token payload: {e}")

    if not isinstance(claims, dict):
        raise AuthError("auth/argument-error", "ID token payload is not an object")
    return claims


def id_token_result(id_token: str) -> IdTokenResult:
    claims = decode_claims(id_token)
    firebase = claims.get("firebase") or {}
    return IdTokenResult(
        token=id_token,
        claims=claims,
        auth_time=_utc(claims.get("auth_time")),
        issued_at_time=_utc(claims.get("iat")),
        expiration_time=_utc(claims.get("exp")),
        sign_in_provider=firebase.get("sign_in_provider"),
    )
