# Trackr_app/__init__.py

from flask import Flask
from flask_session import Session
from redis import from_url

from .extensions import db, migrate, login_manager
from .models import User, Trade
from .api_routes import api
from .auth import auth_bp
from .health_routes import health_bp
from .metrics_routes import metrics_bp
from .db_utils import setup_database_optimizations
from .logging_config import setup_logging, setup_request_id_middleware
from .metrics_setup import setup_metrics
from .rate_limiting import setup_rate_limiting
from .security_middleware import setup_security_middleware


def _init_session(app):
    """Server-side sessions: sessions table by default, Redis when SESSION_TYPE=redis"""
    session_type = app.config.get("SESSION_TYPE", "").lower()
    if session_type == "redis" and "SESSION_REDIS" not in app.config:
        app.config["SESSION_REDIS"] = from_url(app.config["SESSION_REDIS_URL"], decode_responses=False)
    elif session_type == "sqlalchemy":
        app.config.setdefault("SESSION_SQLALCHEMY", db)
    Session(app)


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_pyfile('config.py')
    if test_config:
        app.config.update(test_config)

    setup_logging(app)
    setup_request_id_middleware(app)

    db.init_app(app)
    migrate.init_app(app, db)

    def register_models():
        _ = User, Trade
    register_models()

    setup_database_optimizations(app)
    login_manager.init_app(app)
    _init_session(app)

    setup_security_middleware(app)
    setup_rate_limiting(app)
    setup_metrics(app)

    app.register_blueprint(api)
    app.register_blueprint(auth_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_bp)

    with app.app_context():
        db.create_all()

    app.logger.info("TradeTrackr app created", extra={
        'database': app.config['SQLALCHEMY_DATABASE_URI'].split('://', 1)[0],
        'session_type': app.config.get('SESSION_TYPE'),
    })
    return app
