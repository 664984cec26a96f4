"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from services.mail import Mailer  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    APP_ENV = "testing"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-jwt-secret-key-that-is-long-enough-for-hs256"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    TOKEN_HASH_METHOD = "pbkdf2:sha256:1000"
    MAIL_SUPPRESS_SEND = True
    FRONTEND_URL = "https://app.example.com"
    RATE_LIMIT = "1000 per minute"


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = create_app(_BaseTestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def db_session(app: Flask):
    """Run the test body inside an application context."""

    with app.app_context():
        yield db.session


@pytest.fixture()
def mailer(app: Flask) -> Mailer:
    """Return the suppressed mailer whose outbox records sent messages."""

    return app.extensions["mailer"]
