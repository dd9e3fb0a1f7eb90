import base64
import json
from unittest.mock import MagicMock

import pytest

from fbauth.app import FirebaseConfig, initialize_app


def make_jwt(claims: dict) -> str:
    def seg(obj):
        raw = json.dumps(obj).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    return f"{seg({'alg': 'RS256', 'typ': 'JWT'})}.{seg(claims)}.c2ln"


def fake_response(status: int, body) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    resp.json.return_value = body
    return resp


def sign_in_body(uid="uid-1", email="foo@google.com", id_token="id-1", expires_in="3600"):
    return {
        "localId": uid,
        "email": email,
        "idToken": id_token,
        "refreshToken": "refresh-1",
        "expiresIn": expires_in,
        "registered": True,
    }


def refresh_body(id_token="id-2", refresh_token="refresh-2", expires_in="3600"):
    return {
        "id_token": id_token,
        "refresh_token": refresh_token,
        "expires_in": expires_in,
        "token_type": "Bearer",
        "user_id": "uid-1",
    }


@pytest.fixture(autouse=True)
def no_emulator(monkeypatch):
    monkeypatch.delenv("FIREBASE_AUTH_EMULATOR_HOST", raising=False)


@pytest.fixture
def app(tmp_path):
    return initialize_app(
        FirebaseConfig(api_key="test-key", project_id="demo-project"),
        settings={"persistence": {"directory": str(tmp_path / "store")}},
    )


@pytest.fixture
def http():
    return MagicMock()
