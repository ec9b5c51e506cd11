# backend/agrotrade/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate



def create_app(config_class=Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.procurement import procurement_bp
    from .routes.sales import sales_bp
    from .routes.credit_sales import credit_sales_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(procurement_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(credit_sales_bp)
    app.register_blueprint(reports_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,OPTIONS"
        return response

    @app.errorhandler(404)
    def not_found(_e):
        return {"error": "Route not found"}, 404

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return {"error": "Method not allowed"}, 405

    # Failures outside a route body (guards, user loading) still answer JSON
    @app.errorhandler(500)
    def internal_error(_e):
        return {"error": "Internal server error"}, 500

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
