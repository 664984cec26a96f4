"""Application factory."""

import json
import os
import uuid

from flask import Flask, jsonify, g, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes.auth import auth_bp
from routes.clients import clients_bp
from routes.measurements import measurements_bp
from routes.staff import staff_bp
from routes.users import users_bp
from services.errors import ServiceError
from services.mail import Mailer

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    _register_jwt_handlers()

    # Mail transport is health-checked once here and injected into services
    Mailer.from_config(app.config).init_app(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(clients_bp, url_prefix="/clients")
    app.register_blueprint(staff_bp, url_prefix="/staff")
    app.register_blueprint(measurements_bp, url_prefix="/measurements")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        mailer = app.extensions["mailer"]
        return jsonify({"status": "ok", "mail_transport_verified": mailer.verified})

    # Errors
    _register_error_handlers(app)

    return app


def _error_response(status_code: int, error: str, detail: str):
    request_id = g.get("request_id") or str(uuid.uuid4())
    response = jsonify({"error": error, "detail": detail, "request_id": request_id})
    response.status_code = status_code
    response.headers.setdefault("X-Request-ID", request_id)
    return response


def _register_jwt_handlers() -> None:
    """Report every token failure as a JSON 401."""

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _error_response(401, "Unauthorized", "No token provided.")

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _error_response(401, "Unauthorized", "Invalid or expired token.")

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict, jwt_payload: dict):
        return _error_response(401, "Unauthorized", "Invalid or expired token.")


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(ServiceError)
    def _handle_service_error(error: ServiceError):
        app.logger.info(
            "%s %s -> %s: %s", request.method, request.path, error.status_code, error.message
        )
        return _error_response(int(error.status_code), error.reason, error.message)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "error": getattr(error, "name", "Error"),
            "detail": error.description,
            "request_id": request_id,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        if app.config.get("APP_ENV") == "production":
            app.logger.error(
                "Unhandled application error on %s %s: %s", request.method, request.path, error
            )
        else:
            app.logger.exception("Unhandled application error", exc_info=error)
        return _error_response(500, "Internal Server Error", "An unexpected error occurred.")


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
