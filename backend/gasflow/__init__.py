# backend/gasflow/__init__.py
import logging

from flask import Flask, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from .config import Config, engine_options_for
from .errors import AppError
from .extensions import db, migrate
from .responses import error


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
    if not (config_overrides and "SQLALCHEMY_ENGINE_OPTIONS" in config_overrides):
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options_for(app.config["SQLALCHEMY_DATABASE_URI"])

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.admin import admin_bp
    from .routes.cylinder_types import cylinder_types_bp
    from .routes.inventory import inventory_bp
    from .routes.orders import orders_bp
    from .routes.sales import sales_bp
    from .routes.distributors import distributors_bp
    from .routes.payments import payments_bp
    from .routes.staff import staff_bp
    from .routes.customers import customers_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(cylinder_types_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(distributors_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(reports_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in app.config["CORS_ALLOWED_ORIGINS"]:
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
    @app.errorhandler(AppError)
    def handle_app_error(exc: AppError):
        if exc.status_code >= 500:
            app.logger.error("Application error: %s", exc.message)
        return error(exc.message, exc.status_code, exc.errors)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(exc: IntegrityError):
        db.session.rollback()
        app.logger.warning("Integrity error on %s %s: %s", request.method, request.path, exc.orig)
        return error("Duplicate entry or constraint violation", 409)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        if exc.code == 404:
            return error(f"Route {request.path} not found", 404)
        return error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error("Internal server error", 500)
