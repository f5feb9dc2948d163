# backend/laundry_api/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate



def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.orders import user_orders_bp, admin_orders_bp, super_admin_orders_bp
    from .routes.laundries import admin_laundries_bp, super_admin_laundries_bp
    from .routes.users import super_admin_users_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(user_orders_bp)
    app.register_blueprint(admin_orders_bp)
    app.register_blueprint(super_admin_orders_bp)
    app.register_blueprint(admin_laundries_bp)
    app.register_blueprint(super_admin_laundries_bp)
    app.register_blueprint(super_admin_users_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def register_error_handlers(app: Flask) -> None:
    """Render anything that escapes a route in the standard envelope."""
    from werkzeug.exceptions import HTTPException

    from .errors import ApiError
    from .responses import api_error_response, error_response

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return api_error_response(e)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response("Internal server error", 500)
