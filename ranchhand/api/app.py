"""
RanchHand — Flask API Entry Point

Run:
    python -m ranchhand.api.app

Production:
    gunicorn "ranchhand.api.app:create_app()"
"""

from ranchhand.api import create_app
from ranchhand.config.system_loader import get_system_config
from ranchhand.core.utils.logging_utils import get_component_logger


logger = get_component_logger("Server", component="api")


# ============================================================
# Run Server
# ============================================================

def run(host=None, port=None, debug=None):

    settings = get_system_config()
    server_cfg = settings.get("server", {})

    host = host or server_cfg.get("host", "127.0.0.1")
    port = int(port or server_cfg.get("port", 41414))
    debug = server_cfg.get("debug", False) if debug is None else debug

    app = create_app(settings)

    logger.info("=" * 80)
    logger.info("RanchHand HTTP starting")
    logger.info("Host    : %s", host)
    logger.info("Port    : %s", port)
    logger.info("Backend : %s", settings.get("backend", {}).get("base_url"))
    logger.info("=" * 80)

    app.run(
        host=host,
        port=port,
        debug=debug,
        threaded=True
    )


if __name__ == "__main__":
    run()
