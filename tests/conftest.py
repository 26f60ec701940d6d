# tests/conftest.py

import pytest
from cachelib import SimpleCache

from Trackr_app import create_app
from Trackr_app.extensions import db
from Trackr_app.storage import TradeStorage

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret',
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'SESSION_TYPE': 'cachelib',
    'RATELIMIT_ENABLED': False,
    'RATELIMIT_STORAGE_URI': 'memory://',
    'ENABLE_METRICS': False,
    'LOG_LEVEL': 'WARNING',
    'APP_TIMEZONE': '',
    'OIDC_ISSUER_URL': 'https://issuer.example.com',
    'OIDC_CLIENT_ID': 'trackr-client',
    'OIDC_CLIENT_SECRET': 'client-secret',
    'OIDC_REDIRECT_URI': 'http://localhost/api/callback',
}


@pytest.fixture
def app_config():
    """Per-module overrides of TEST_CONFIG; override this fixture in a test module"""
    return {}


@pytest.fixture
def app(app_config):
    config = dict(TEST_CONFIG, SESSION_CACHELIB=SimpleCache(), **app_config)
    app = create_app(config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app_ctx):
    return TradeStorage()


@pytest.fixture
def make_user(app):
    def _make_user(user_id, email=None, **fields):
        with app.app_context():
            user = TradeStorage().upsert_user({
                'id': user_id,
                'email': email or f'{user_id}@example.com',
                **fields,
            })
            return user.id
    return _make_user


def login_as(client, user_id):
    """Put a Flask-Login session for ``user_id`` into the test client"""
    with client.session_transaction() as sess:
        sess['_user_id'] = user_id
        sess['_fresh'] = True


@pytest.fixture
def auth_client(client, make_user):
    user_id = make_user('user-a')
    login_as(client, user_id)
    return client


@pytest.fixture
def login():
    return login_as
