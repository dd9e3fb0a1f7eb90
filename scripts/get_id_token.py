import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import logging
import os

from fbauth.app import config_from_dict, initialize_app, load_config
from fbauth.persistence import Persistence
from fbauth.session import get_auth

logger = logging.getLogger("get_id_token")


def read_credentials(cfg: dict) -> tuple:
    user = cfg.get("test_user") or {}
    email = os.environ.get("FIREBASE_TEST_EMAIL") or user.get("email")
    password = os.environ.get("FIREBASE_TEST_PASSWORD") or user.get("password")
    if not email or not password:
        raise RuntimeError("Set FIREBASE_TEST_EMAIL and FIREBASE_TEST_PASSWORD")
    return email, password


def main(http=None) -> str:
    """
    sign in as the test user, print a freshly minted ID token, sign out.
    token goes to stdout on its own so it can be piped into other tests
    """
    cfg = load_config()
    config = config_from_dict(cfg.get("firebase", {}))
    app = initialize_app(config, settings=cfg)
    auth = get_auth(app, http=http)
    email, password = read_credentials(cfg)

    try:
        auth.set_persistence(Persistence.NONE)
        cred = auth.sign_in_with_email_and_password(email, password)
        token = cred.user.get_id_token(True)
        print(token)
        return token
    finally:
        auth.sign_out()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    main()
