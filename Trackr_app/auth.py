# Trackr_app/auth.py
"""
Session authentication against an external OpenID Connect provider.

/api/login redirects to the provider, /api/callback exchanges the code,
upserts the user from the userinfo claims and starts a Flask-Login
session, /api/logout ends it.
"""

import logging
import secrets
from urllib.parse import urlencode

import requests
from flask import Blueprint, current_app, jsonify, redirect, request, session, url_for
from flask_login import login_user, logout_user
from pydantic import ValidationError

from .extensions import login_manager
from .rate_limiting import limiter, RATE_LIMITS
from .schemas import UpsertUser, dump_supplied
from .storage import TradeStorage
from .errors import StoreError

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api')

STATE_KEY = 'oidc_state'


@login_manager.user_loader
def load_user(user_id):
    return TradeStorage().get_user(user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'message': 'Unauthorized'}), 401


class OIDCClient:
    """Minimal authorization-code client over requests"""

    def __init__(self, config):
        self.issuer = config.get('OIDC_ISSUER_URL', '').rstrip('/')
        self.client_id = config.get('OIDC_CLIENT_ID')
        self.client_secret = config.get('OIDC_CLIENT_SECRET')
        self.scopes = config.get('OIDC_SCOPES', 'openid email profile')
        self.timeout = config.get('OIDC_TIMEOUT', 10)
        self.redirect_uri = config.get('OIDC_REDIRECT_URI') or None

    def discover(self) -> dict:
        r = requests.get(f"{self.issuer}/.well-known/openid-configuration", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def authorization_url(self, metadata: dict, state: str, redirect_uri: str) -> str:
        params = {
            'response_type': 'code',
            'client_id': self.client_id,
            'redirect_uri': redirect_uri,
            'scope': self.scopes,
            'state': state,
        }
        return f"{metadata['authorization_endpoint']}?{urlencode(params)}"

    def exchange_code(self, metadata: dict, code: str, redirect_uri: str) -> dict:
        r = requests.post(
            metadata['token_endpoint'],
            data={
                'grant_type': 'authorization_code',
                'code': code,
                'redirect_uri': redirect_uri,
                'client_id': self.client_id,
                'client_secret': self.client_secret,
            },
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json()

    def userinfo(self, metadata: dict, access_token: str) -> dict:
        r = requests.get(
            metadata['userinfo_endpoint'],
            headers={'Authorization': f'Bearer {access_token}'},
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json()


def claims_to_user(claims: dict) -> dict:
    """Map identity claims to user fields, accepting standard OIDC names as fallbacks"""
    fields = {
        'email': claims.get('email'),
        'first_name': claims.get('first_name') or claims.get('given_name'),
        'last_name': claims.get('last_name') or claims.get('family_name'),
        'profile_image_url': claims.get('profile_image_url') or claims.get('picture'),
    }
    # claims the provider left out must not clear the stored profile
    user = UpsertUser(id=str(claims['sub']), **{k: v for k, v in fields.items() if v is not None})
    return dump_supplied(user)


def _client():
    return OIDCClient(current_app.config)


def _redirect_uri(client):
    return client.redirect_uri or url_for('auth.callback', _external=True)


@auth_bp.route('/login', methods=['GET'])
@limiter.limit(RATE_LIMITS['auth'])
def login():
    client = _client()
    try:
        metadata = client.discover()
    except requests.RequestException as e:
        logger.error(f"OIDC discovery failed: {e}")
        return jsonify({'message': 'Identity provider unavailable'}), 502

    state = secrets.token_urlsafe(32)
    session[STATE_KEY] = state
    return redirect(client.authorization_url(metadata, state, _redirect_uri(client)))


@auth_bp.route('/callback', methods=['GET'])
@limiter.limit(RATE_LIMITS['auth'])
def callback():
    expected_state = session.pop(STATE_KEY, None)
    state = request.args.get('state')
    if not expected_state or not state or not secrets.compare_digest(state, expected_state):
        return jsonify({'message': 'Invalid login state'}), 400

    code = request.args.get('code')
    if not code:
        return jsonify({'message': 'Missing authorization code',
                        'error': request.args.get('error')}), 400

    client = _client()
    try:
        metadata = client.discover()
        tokens = client.exchange_code(metadata, code, _redirect_uri(client))
        claims = client.userinfo(metadata, tokens['access_token'])
        user_data = claims_to_user(claims)
    except (requests.RequestException, KeyError, ValidationError) as e:
        logger.error(f"OIDC login failed: {e}")
        return jsonify({'message': 'Identity provider login failed'}), 502

    try:
        user = TradeStorage().upsert_user(user_data)
    except StoreError:
        logger.exception("Error upserting user")
        return jsonify({'message': 'Failed to sign in'}), 500

    login_user(user)
    logger.info(f"User {user.id} signed in")
    return redirect('/')


@auth_bp.route('/logout', methods=['GET'])
def logout():
    logout_user()
    session.clear()

    client = _client()
    if not client.issuer:
        return redirect('/')
    try:
        end_session = client.discover().get('end_session_endpoint')
    except requests.RequestException as e:
        logger.warning(f"OIDC discovery failed during logout: {e}")
        end_session = None
    if not end_session:
        return redirect('/')

    params = {'client_id': client.client_id, 'post_logout_redirect_uri': request.host_url}
    return redirect(f"{end_session}?{urlencode(params)}")
