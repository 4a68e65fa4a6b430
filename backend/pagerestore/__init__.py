from flask import Flask, send_file, current_app
from .config import config_by_name
from .extensions import db, migrate, jwt
from .api.v1 import v1_bp
from .middleware.edit_context_middleware import edit_context_middleware
from .errors import register_error_handlers
from .utils.restore_log import configure_restore_log
from flask_swagger_ui import get_swaggerui_blueprint
import os


def create_app(config_name: str = "development", overrides: dict | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    if overrides:
        app.config.update(overrides)

    if not app.config.get("RESTORE_STAGING_DIR"):
        app.config["RESTORE_STAGING_DIR"] = os.path.join(app.instance_path, "page-edit-restore")
    os.makedirs(app.config["RESTORE_STAGING_DIR"], exist_ok=True)

    # -------------------------------------------------
    # Extensions
    # -------------------------------------------------
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    configure_restore_log(app)

    # -------------------------------------------------
    # Middleware
    # -------------------------------------------------
    edit_context_middleware(app)

    # -------------------------------------------------
    # API Blueprints
    # -------------------------------------------------
    app.register_blueprint(v1_bp, url_prefix="/api/v1")
    register_error_handlers(app)

    # -------------------------------------------------
    # Serve OpenAPI YAML (PUBLIC, NO TENANT)
    # -------------------------------------------------
    @app.route("/openapi/restore.yaml", methods=["GET"], endpoint="openapi_restore")
    def serve_openapi():
        spec_path = os.path.join(
            current_app.root_path,
            "api",
            "v1",
            "restore_openapi.yaml",
        )

        if not os.path.exists(spec_path):
            raise FileNotFoundError("restore_openapi.yaml not found")

        return send_file(
            spec_path,
            mimetype="application/yaml",
            as_attachment=False,
        )

    # -------------------------------------------------
    # Swagger UI
    # -------------------------------------------------
    SWAGGER_URL = "/swagger"
    API_URL = "/openapi/restore.yaml"

    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            "app_name": "Page Edit Restore API",
            "deepLinking": True,
        },
    )

    app.register_blueprint(swaggerui_blueprint, url_prefix=SWAGGER_URL)

    return app
