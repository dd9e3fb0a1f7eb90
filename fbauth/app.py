from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from fbauth.errors import AuthError

DEFAULT_CONFIG_PATH = Path("config/config.yaml")
DEFAULT_APP_NAME = "[DEFAULT]"
DEFAULT_TIMEOUT = 10.0

EMULATOR_HOST_ENV = "FIREBASE_AUTH_EMULATOR_HOST"

IDENTITY_TOOLKIT_HOST = "https://identitytoolkit.googleapis.com"
SECURE_TOKEN_HOST = "https://securetoken.googleapis.com"

# web console snippet uses camelCase, our yaml uses snake_case
_CAMEL_KEYS = {
    "apiKey": "api_key",
    "authDomain": "auth_domain",
    "databaseURL": "database_url",
    "projectId": "project_id",
    "storageBucket": "storage_bucket",
    "messagingSenderId": "messaging_sender_id",
    "appId": "app_id",
}


@dataclass(frozen=True)
class FirebaseConfig:
    api_key: str
    auth_domain: Optional[str] = None
    database_url: Optional[str] = None
    project_id: Optional[str] = None
    storage_bucket: Optional[str] = None
    messaging_sender_id: Optional[str] = None
    app_id: Optional[str] = None


@dataclass
class FirebaseApp:
    name: str
    config: FirebaseConfig
    timeout: float = DEFAULT_TIMEOUT
    persistence_dir: Optional[Path] = None

    @property
    def emulator_host(self) -> Optional[str]:
        return os.environ.get(EMULATOR_HOST_ENV) or None

    def identity_toolkit_url(self, endpoint: str) -> str:
        host = self.emulator_host
        if host:
            return f"http://{host}/identitytoolkit.googleapis.com/v1/{endpoint}"
        return f"{IDENTITY_TOOLKIT_HOST}/v1/{endpoint}"

    def secure_token_url(self) -> str:
        host = self.emulator_host
        if host:
            return f"http://{host}/securetoken.googleapis.com/v1/token"
        return f"{SECURE_TOKEN_HOST}/v1/token"


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    if path is None:
        path = Path(os.environ.get("FBAUTH_CONFIG", DEFAULT_CONFIG_PATH))
    with Path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def config_from_dict(section: Dict[str, Any]) -> FirebaseConfig:
    values: Dict[str, Any] = {}
    for key, value in (section or {}).items():
        name = _CAMEL_KEYS.get(key, key)
        if name in FirebaseConfig.__dataclass_fields__:
            values[name] = value

    api_key = values.get("api_key")
    if not isinstance(api_key, str) or not api_key.strip():
        raise AuthError("auth/invalid-api-key", "firebase.api_key is missing")

    return FirebaseConfig(**values)


def initialize_app(
    config: Optional[FirebaseConfig] = None,
    name: str = DEFAULT_APP_NAME,
    settings: Optional[Dict[str, Any]] = None,
) -> FirebaseApp:
    """
    build an app handle from a config, or from config/config.yaml when
    no config is passed
    """
    if settings is None:
        settings = load_config() if config is None else {}
    if config is None:
        config = config_from_dict(settings.get("firebase", {}))

    http = settings.get("http") or {}
    persistence = settings.get("persistence") or {}
    directory = persistence.get("directory")

    return FirebaseApp(
        name=name,
        config=config,
        timeout=float(http.get("timeout", DEFAULT_TIMEOUT)),
        persistence_dir=Path(directory).expanduser() if directory else None,
    )
