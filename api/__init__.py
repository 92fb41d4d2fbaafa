import logging

import click
from flasgger import Swagger
from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from api.config import BaseConfig, get_config
from api.errors import register_error_handlers
from api.version import __version__
from models.db_storage import DBStorage
from services.container import EXTENSION_KEY, build_services

logger = logging.getLogger(__name__)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "File Vault API",
        "version": __version__,
        "description": "Accounts with per-device refresh sessions and private file storage.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config: BaseConfig) -> None:
    """Root logger verbosity follows LOG_LEVEL (defaulted per environment)."""
    logging.basicConfig(level=config.LOG_LEVEL, format=LOG_FORMAT)
    logging.getLogger().setLevel(config.LOG_LEVEL)


def create_app(config: BaseConfig | str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    The config object is built once here (unless a test hands one in) and
    its values are passed to every component; nothing is shared through
    module globals.
    """
    if config is None or isinstance(config, str):
        config = get_config(config)
    configure_logging(config)

    app = Flask(__name__)
    app.config.from_object(config)

    if config.TRUST_PROXY:
        # Client address from the first X-Forwarded-For hop
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1)

    origins = config.CORS_ORIGINS if config.CORS_ORIGINS == "*" else [
        o.strip() for o in config.CORS_ORIGINS.split(",") if o.strip()
    ]
    CORS(
        app,
        resources={r"/*": {"origins": origins}},
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    storage = DBStorage(config.DATABASE_URL, echo=config.SQLALCHEMY_ECHO)
    storage.reload()
    app.extensions[EXTENSION_KEY] = build_services(config, storage)

    from api.auth import bp as auth_bp
    from api.files import bp as files_bp
    from api.health import bp as health_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(files_bp)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        storage.reload()
        click.echo("Database tables created.")

    @app.route("/")
    def root():
        return {
            "message": "Welcome to File Vault API",
            "docs": "/apidocs/",
            "health": "/health",
        }, 200

    logger.info("File Vault API configured for %s", config.APP_ENV)
    return app
