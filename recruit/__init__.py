import logging.config
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_migrate import Migrate
from .extensions import db, login_manager, tenant_lock

migrate = Migrate()


def configure_logging(level):
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "default"},
        },
        "loggers": {
            "recruit": {"level": level, "handlers": ["console"], "propagate": False},
        },
    })
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_app(config_object="config.Config"):
    """App factory. Pass another config object (e.g. for tests) to override settings."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    tenant_lock.init_app(app)

    # completion client is resolved per app so tests can swap in a fake
    from .services.openai_wrap import CompletionClient
    app.extensions["completion_client"] = CompletionClient.from_config(app.config)
    if app.extensions["completion_client"] is None:
        app.logger.warning("OPENAI_API_KEY is not set; analyze-and-shortlist will be unavailable")

    @login_manager.request_loader
    def load_user_from_request(request):
        from .utils.tokens import bearer_token, load_user_from_token
        token = bearer_token(request)
        if not token:
            return None
        return load_user_from_token(token)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required"}), 401

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .blueprints.auth import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")

    from .blueprints.candidates import bp as candidates_bp
    app.register_blueprint(candidates_bp, url_prefix="/candidates")

    from .cli import shortlist_cli
    app.cli.add_command(shortlist_cli)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})

    return app
