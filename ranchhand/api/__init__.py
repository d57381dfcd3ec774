"""
RanchHand — API Initialization

Creates the Flask application instance.
Registers routes and JSON error handlers.

Usage:
    from ranchhand.api import create_app
    app = create_app()
"""

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from ranchhand.api.auth import DEFAULT_HEADER, ensure_secret
from ranchhand.api.routes import register_routes
from ranchhand.api.services import build_services
from ranchhand.config.system_loader import get_system_config
from ranchhand.core.errors import RanchHandError
from ranchhand.core.utils.logging_utils import get_component_logger


logger = get_component_logger("App", component="api")


# ============================================================
# CREATE FLASK APP
# ============================================================

def create_app(settings=None, store=None, profiles=None, client=None, secret=None):

    settings = settings or get_system_config()
    server_cfg = settings.get("server", {})
    auth_cfg = settings.get("auth", {})

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = server_cfg.get("max_body_bytes", 10 * 1024 * 1024)
    app.config["RANCHHAND_AUTH_HEADER"] = auth_cfg.get("header", DEFAULT_HEADER)
    app.config["RANCHHAND_SECRET"] = secret or ensure_secret(
        auth_cfg.get("secret_file", "~/.threadweaverinc/auth/shared_secret.txt")
    )

    # --------------------------------------------------------
    # Enable CORS
    # --------------------------------------------------------
    cors_origins_raw = str(server_cfg.get("cors_origins", "*"))
    cors_origins = (
        [origin.strip() for origin in cors_origins_raw.split(",") if origin.strip()]
        if cors_origins_raw != "*"
        else "*"
    )
    CORS(app, resources={r"/*": {"origins": cors_origins}})

    # --------------------------------------------------------
    # Register Routes
    # --------------------------------------------------------
    services = build_services(settings, store=store, profiles=profiles, client=client)
    app.extensions["ranchhand"] = services
    register_routes(app, services)

    # --------------------------------------------------------
    # Error Handlers (JSON-safe, no stack traces)
    # --------------------------------------------------------
    @app.errorhandler(RanchHandError)
    def handle_service_error(e):
        if e.http_status >= 500:
            logger.error("%s", e)
        else:
            logger.info("%s", e)
        return jsonify(e.to_dict()), e.http_status

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        error = "not-found" if e.code == 404 else e.name
        return jsonify({"ok": False, "error": error, "detail": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_exception(e):
        logger.exception("Unhandled Exception:")
        return jsonify({
            "ok": False,
            "error": "InternalError",
            "detail": str(e)
        }), 500

    return app
