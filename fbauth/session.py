from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

import requests

from fbauth.app import FirebaseApp
from fbauth.errors import (
    AuthError,
    INTERNAL_ERROR,
    NETWORK_REQUEST_FAILED,
    from_server_message,
)
from fbauth.persistence import Persistence, make_store, user_key
from fbauth.token_claims import IdTokenResult, id_token_result

logger = logging.getLogger(__name__)

# refresh a cached token this many seconds before it actually expires
TOKEN_REFRESH_BUFFER_SEC = 30


def mask_email(email: Optional[str]) -> str:
    if not email:
        return "<none>"
    return email[:3] + "***"


def _post(
    auth: "Auth",
    url: str,
    *,
    json_body: Optional[Dict[str, Any]] = None,
    form: Optional[Dict[str, str]] = None,
    required: Tuple[str, ...] = (),
) -> Dict[str, Any]:
    params = {"key": auth.app.config.api_key}
    try:
        resp = auth.http.post(
            url,
            params=params,
            json=json_body,
            data=form,
            timeout=auth.app.timeout,
        )
    except requests.RequestException as e:
        raise AuthError(NETWORK_REQUEST_FAILED, str(e)) from e

    try:
        body = resp.json()
    except ValueError:
        body = {}

    if not resp.ok:
        err = body.get("error") if isinstance(body, dict) else None
        msg = err.get("message") if isinstance(err, dict) else None
        logger.debug("auth backend returned %s: %s", resp.status_code, msg)
        raise from_server_message(msg)

    if not isinstance(body, dict):
        raise AuthError(INTERNAL_ERROR, f"unexpected response body from {url}")
    missing = [name for name in required if not body.get(name)]
    if missing:
        raise AuthError(INTERNAL_ERROR, f"response is missing {', '.join(missing)}")
    return body


@dataclass
class User:
    uid: str
    email: Optional[str]
    id_token: str
    refresh_token: str
    expiration_time: float  # epoch seconds
    _auth: Optional["Auth"] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "id_token": self.id_token,
            "refresh_token": self.refresh_token,
            "expiration_time": self.expiration_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], auth: "Auth") -> "User":
        return cls(
            uid=data["uid"],
            email=data.get("email"),
            id_token=data["id_token"],
            refresh_token=data["refresh_token"],
            expiration_time=float(data["expiration_time"]),
            _auth=auth,
        )

    def _is_fresh(self) -> bool:
        return time.time() < self.expiration_time - TOKEN_REFRESH_BUFFER_SEC

    def get_id_token(self, force_refresh: bool = False) -> str:
        if not force_refresh and self._is_fresh():
            return self.id_token
        if self._auth is None:
            raise AuthError("auth/internal-error", "user is not bound to an auth instance")

        body = _post(
            self._auth,
            self._auth.app.secure_token_url(),
            form={"grant_type": "refresh_token", "refresh_token": self.refresh_token},
            required=("id_token",),
        )
        self.id_token = body["id_token"]
        self.refresh_token = body.get("refresh_token", self.refresh_token)
        self.expiration_time = time.time() + int(body.get("expires_in", 3600))
        logger.info("refreshed ID token for uid=%s", self.uid)

        self._auth._save_user(self)
        return self.id_token

    def get_id_token_result(self, force_refresh: bool = False) -> IdTokenResult:
        return id_token_result(self.get_id_token(force_refresh))


@dataclass
class UserCredential:
    user: User
    provider_id: str = "password"
    operation_type: str = "signIn"


class Auth:
    def __init__(self, app: FirebaseApp, http: Optional[requests.Session] = None) -> None:
        self.app = app
        self.http = http or requests.Session()
        self.persistence = Persistence.NONE
        self._store = make_store(self.persistence)
        self.current_user: Optional[User] = None

    @property
    def _key(self) -> str:
        return user_key(self.app.config.api_key, self.app.name)

    def _save_user(self, user: User) -> None:
        if user is self.current_user:
            self._store.set(self._key, user.to_dict())

    def _restore_user(self) -> None:
        try:
            data = self._store.get(self._key)
            if data:
                self.current_user = User.from_dict(data, self)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("dropping unreadable stored user: %s", e)
            self._store.remove(self._key)
            self.current_user = None
            return
        if self.current_user is not None:
            logger.info("restored signed-in user uid=%s", self.current_user.uid)

    def set_persistence(self, mode: Union[Persistence, str]) -> None:
        if not isinstance(mode, Persistence):
            try:
                mode = Persistence(str(mode).upper())
            except ValueError as e:
                raise AuthError("auth/argument-error", f"unsupported persistence: {mode!r}") from e
        if mode == self.persistence:
            return

        new_store = make_store(mode, self.app.persistence_dir)
        self._store.remove(self._key)  # move the user, don't copy it
        self._store = new_store
        self.persistence = mode

        if self.current_user is not None:
            self._save_user(self.current_user)
        else:
            self._restore_user()

    def sign_in_with_email_and_password(self, email: str, password: str) -> UserCredential:
        if not email:
            raise AuthError("auth/invalid-email", "email is empty")
        if not password:
            raise AuthError("auth/missing-password", "password is empty")

        logger.info("signing in %s", mask_email(email))
        body = _post(
            self,
            self.app.identity_toolkit_url("accounts:signInWithPassword"),
            json_body={"email": email, "password": password, "returnSecureToken": True},
            required=("localId", "idToken", "refreshToken"),
        )

        user = User(
            uid=body["localId"],
            email=body.get("email", email),
            id_token=body["idToken"],
            refresh_token=body["refreshToken"],
            expiration_time=time.time() + int(body.get("expiresIn", 3600)),
            _auth=self,
        )
        self.current_user = user
        self._save_user(user)
        logger.info("signed in uid=%s", user.uid)
        return UserCredential(user=user)

    def sign_out(self) -> None:
        # local only, the backend keeps no session for password sign-in
        user = self.current_user
        self.current_user = None
        self._store.remove(self._key)
        if user is not None:
            logger.info("signed out uid=%s", user.uid)


def get_auth(
    app: FirebaseApp,
    http: Optional[requests.Session] = None,
    persistence: Optional[Union[Persistence, str]] = None,
) -> Auth:
    auth = Auth(app, http=http)
    if persistence is not None:
        auth.set_persistence(persistence)
    return auth
