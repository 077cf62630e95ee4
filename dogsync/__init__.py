import sys
import logging
from datetime import datetime, timezone

from flask import Flask, jsonify
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException


def create_app(settings=None):
    from .config import Settings
    from .errors import SyncError, ConfigError, DiscoveryError
    from .utils.logger import exception, log_level, LOG_FORMAT, LOG_DATEFMT

    load_dotenv()
    app = Flask(__name__)
    app.config["SETTINGS"] = settings or Settings.from_env()
    level = log_level()

    # =========================================================
    # Configure logging so logs show up under gunicorn
    # ---------------------------------------------------------
    # app.logger is the "dogsync" logger, the same one the
    # services write to through utils.logger.
    # =========================================================
    gunicorn_error = logging.getLogger("gunicorn.error")
    app.logger.handlers = list(gunicorn_error.handlers)
    app.logger.setLevel(level)

    # Also add a stdout handler (for safety)
    sh = logging.StreamHandler(sys.stdout)
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    app.logger.addHandler(sh)

    # =========================================================
    # Blueprints
    # =========================================================
    from .routes.webhooks_cognito import bp as webhook_bp
    from .routes.cognito_proxy import bp as cognito_bp
    from .routes.sync_trigger import bp as sync_bp
    from .routes.shopify import bp as shopify_bp
    from .routes.setup_metafields import bp as setup_bp

    app.register_blueprint(webhook_bp, url_prefix="/cognito")
    app.register_blueprint(cognito_bp, url_prefix="/cognito")
    app.register_blueprint(sync_bp, url_prefix="/sync")
    app.register_blueprint(shopify_bp, url_prefix="/shopify")
    app.register_blueprint(setup_bp, url_prefix="/setup/metafields")

    # =========================================================
    # Errors: always JSON, details stay in the server log
    # =========================================================
    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(error=e.description), e.code

    @app.errorhandler(ConfigError)
    def config_error(e):
        app.logger.error(f"config: {e}")
        return jsonify(error=str(e)), 500

    @app.errorhandler(DiscoveryError)
    def discovery_error(e):
        exception(f"[discovery] {e}")
        return jsonify(error=str(e), attempts=[a.to_dict() for a in e.attempts]), 500

    @app.errorhandler(SyncError)
    def sync_error(e):
        exception(f"[error] {e}")
        return jsonify(error=str(e)), 500

    @app.errorhandler(Exception)
    def unhandled(e):
        exception(f"[error] unhandled {type(e).__name__}: {e}")
        return jsonify(error=str(e) or "internal_error"), 500

    # =========================================================
    # Health / status
    # =========================================================
    @app.get("/health")
    def health():
        app.logger.info("Health check endpoint called")
        return {"ok": True}, 200

    @app.get("/status")
    def status():
        return {
            "service": "dogsync",
            "status": "online",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": [
                "POST /cognito/webhook - Webhook for Cognito form submissions",
                "POST /sync/run - Manual sync of every entry",
                "POST /sync/scan - Sync by probing entry numbers",
                "GET /status - Service status",
            ],
        }, 200

    return app
