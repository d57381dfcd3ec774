"""
RanchHand — Shared-Secret Auth

Provides:
- ensure_secret   → read or provision the shared secret file (mode 0600)
- require_token   → decorator checking the x-ranchhand-token header
"""

import hmac
import os
import secrets
from functools import wraps

from flask import current_app, request

from ranchhand.config.system_loader import expand_path
from ranchhand.core.errors import Unauthorized
from ranchhand.core.utils.logging_utils import get_component_logger


logger = get_component_logger("Auth", component="api")

DEFAULT_HEADER = "x-ranchhand-token"


# ============================================================
# SECRET PROVISIONING
# ============================================================

def ensure_secret(secret_file: str) -> str:
    """
    Return the secret stored in secret_file, generating and writing a new
    one when the file is missing or empty.
    """

    path = expand_path(secret_file)

    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            existing = f.read().strip()
        if existing:
            return existing

    secret = secrets.token_hex(32)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(secret)
        logger.info("Provisioned new shared secret at %s", path)
    except OSError:
        logger.exception("Could not persist shared secret at %s; using in-memory secret", path)

    return secret


# ============================================================
# REQUIRE TOKEN
# ============================================================

def require_token(f):

    @wraps(f)
    def decorated(*args, **kwargs):

        header = current_app.config.get("RANCHHAND_AUTH_HEADER", DEFAULT_HEADER)
        expected = current_app.config.get("RANCHHAND_SECRET") or ""
        supplied = request.headers.get(header, "")

        if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
            raise Unauthorized("unauthorized")

        return f(*args, **kwargs)

    return decorated
