"""
RanchHand — YAML Settings Loader

Loads:
- settings.yaml

Environment overrides (a .env file is honoured):
- OAI_BASE, OAI_API_KEY, OAI_DEFAULT_MODEL, OAI_TIMEOUT_MS
- RANCHHAND_HOST, RANCHHAND_PORT
- TWI_SECRET_FILE, RANCHHAND_PROFILES_FILE

Usage:
    from ranchhand.config.system_loader import get_system_config
"""

import os

import yaml
from dotenv import load_dotenv


# -------------------------------------------------
# Base Config Path
# -------------------------------------------------

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

load_dotenv()


def _load_yaml(filename: str):
    path = os.path.join(BASE_DIR, filename)

    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


# -------------------------------------------------
# Environment Overrides
# -------------------------------------------------

ENV_OVERRIDES = {
    "OAI_BASE": ("backend", "base_url", str),
    "OAI_API_KEY": ("backend", "api_key", str),
    "OAI_DEFAULT_MODEL": ("backend", "default_model", str),
    "OAI_TIMEOUT_MS": ("backend", "timeout_seconds", lambda v: int(v) / 1000.0),
    "RANCHHAND_HOST": ("server", "host", str),
    "RANCHHAND_PORT": ("server", "port", int),
    "TWI_SECRET_FILE": ("auth", "secret_file", str),
    "RANCHHAND_PROFILES_FILE": ("profiles", "path", str),
}


def _apply_env(config: dict) -> dict:
    for env_key, (section, key, cast) in ENV_OVERRIDES.items():
        raw = os.getenv(env_key)
        if raw is None or raw == "":
            continue
        try:
            config.setdefault(section, {})[key] = cast(raw)
        except ValueError:
            raise ValueError(f"Invalid value for {env_key}: {raw!r}")
    return config


def expand_path(path: str) -> str:
    return os.path.abspath(os.path.expanduser(path))


# -------------------------------------------------
# Public Config Getters
# -------------------------------------------------

def get_system_config():
    return _apply_env(_load_yaml("settings.yaml"))


def get_backend_config():
    return get_system_config().get("backend", {})
