"""
Tests for the manual get_id_token script
"""
import pytest

from fbauth.errors import AuthError
from fbauth.session import Auth
from scripts import get_id_token
from tests.conftest import fake_response, refresh_body, sign_in_body

CONFIG = """
firebase:
  apiKey: "script-key"
  projectId: "demo-project"
test_user:
  email: "foo@google.com"
  password: "123456"
"""


@pytest.fixture(autouse=True)
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    monkeypatch.setenv("FBAUTH_CONFIG", str(path))
    monkeypatch.delenv("FIREBASE_TEST_EMAIL", raising=False)
    monkeypatch.delenv("FIREBASE_TEST_PASSWORD", raising=False)
    return path


@pytest.fixture
def sign_outs(monkeypatch):
    calls = []
    original = Auth.sign_out

    def tracking(self):
        calls.append(self)
        original(self)

    monkeypatch.setattr(Auth, "sign_out", tracking)
    return calls


def test_prints_force_refreshed_token(http, capsys, sign_outs):
    http.post.side_effect = [
        fake_response(200, sign_in_body(id_token="stale")),
        fake_response(200, refresh_body(id_token="fresh")),
    ]

    token = get_id_token.main(http=http)

    assert token == "fresh"
    assert capsys.readouterr().out == "fresh\n"
    assert http.post.call_count == 2
    assert len(sign_outs) == 1
    assert sign_outs[0].current_user is None


def test_signs_out_when_sign_in_fails(http, capsys, sign_outs):
    http.post.return_value = fake_response(
        400, {"error": {"code": 400, "message": "INVALID_LOGIN_CREDENTIALS"}}
    )

    with pytest.raises(AuthError) as exc:
        get_id_token.main(http=http)

    assert exc.value.code == "auth/invalid-credential"
    assert capsys.readouterr().out == ""
    assert len(sign_outs) == 1


def test_signs_out_when_refresh_fails(http, sign_outs):
    http.post.side_effect = [
        fake_response(200, sign_in_body()),
        fake_response(400, {"error": {"code": 400, "message": "USER_DISABLED"}}),
    ]

    with pytest.raises(AuthError) as exc:
        get_id_token.main(http=http)

    assert exc.value.code == "auth/user-disabled"
    assert len(sign_outs) == 1
    assert sign_outs[0].current_user is None


def test_env_overrides_credentials(http, monkeypatch):
    monkeypatch.setenv("FIREBASE_TEST_EMAIL", "bar@example.com")
    monkeypatch.setenv("FIREBASE_TEST_PASSWORD", "secret")
    http.post.side_effect = [
        fake_response(200, sign_in_body(email="bar@example.com")),
        fake_response(200, refresh_body()),
    ]

    get_id_token.main(http=http)

    first_call = http.post.call_args_list[0]
    assert first_call.kwargs["json"]["email"] == "bar@example.com"
    assert first_call.kwargs["json"]["password"] == "secret"
    assert first_call.kwargs["params"] == {"key": "script-key"}


def test_missing_credentials():
    with pytest.raises(RuntimeError):
        get_id_token.read_credentials({"test_user": {"email": "foo@google.com"}})
