from flask import Flask, abort, send_from_directory
from .config import config_by_name
from .extensions import db, migrate, jwt, homepage_cache
from .api.v1 import v1_bp
from .errors import register_error_handlers
from flask_swagger_ui import get_swaggerui_blueprint
import os

OPENAPI_DIR = os.path.join(os.path.dirname(__file__), "api", "v1")
OPENAPI_FILE = "homepage_openapi.yaml"
OPENAPI_URL = "/openapi/homepage.yaml"
SWAGGER_URL = "/swagger"


def register_api_docs(app: Flask) -> None:
    """Public OpenAPI document plus a Swagger UI pointing at it."""

    @app.get(OPENAPI_URL, endpoint="openapi_homepage")
    def homepage_openapi():
        if not os.path.isfile(os.path.join(OPENAPI_DIR, OPENAPI_FILE)):
            app.logger.error(f"{OPENAPI_FILE} is missing from {OPENAPI_DIR}")
            abort(404)
        return send_from_directory(OPENAPI_DIR, OPENAPI_FILE, mimetype="application/yaml")

    docs = get_swaggerui_blueprint(
        SWAGGER_URL,
        OPENAPI_URL,
        config={
            "app_name": "Catalog Admin - Homepage",
            "deepLinking": True,
            "persistAuthorization": True,
        },
    )
    app.register_blueprint(docs, url_prefix=SWAGGER_URL)


def create_app(config_name: str = "development") -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # -------------------------------------------------
    # Extensions
    # -------------------------------------------------
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    homepage_cache.init_app(app)

    # -------------------------------------------------
    # Routes
    # -------------------------------------------------
    app.register_blueprint(v1_bp, url_prefix="/api/v1")
    register_error_handlers(app)
    register_api_docs(app)

    # -------------------------------------------------
    # Warm the section cache
    # -------------------------------------------------
    if app.config["HOMEPAGE_CACHE_PRELOAD"]:
        homepage_cache.fetch()
        if homepage_cache.state.error is not None:
            app.logger.warning(
                f"Homepage cache preload failed, first request will retry: {homepage_cache.state.error}"
            )

    return app
