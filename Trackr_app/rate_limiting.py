# Trackr_app/rate_limiting.py
"""
Rate limiting using Flask-Limiter, keyed on the logged-in user when there is one
"""

import os
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import current_user

RATE_LIMITS = {
    'read': os.environ.get('RATE_LIMITS_READ', '60/minute'),
    'write': os.environ.get('RATE_LIMITS_WRITE', '30/minute'),
    'auth': os.environ.get('RATE_LIMITS_AUTH', '10/minute'),
    'global_ceiling': os.environ.get('RATE_LIMITS_GLOBAL', '200/minute'),
}


def get_user_id():
    """Rate limit key: user id when authenticated, remote address otherwise"""
    if current_user and current_user.is_authenticated:
        return f"user:{current_user.id}"
    return get_remote_address()


limiter = Limiter(
    key_func=get_user_id,
    default_limits=[RATE_LIMITS['global_ceiling']],
)


def setup_rate_limiting(app):
    """Bind the limiter; storage comes from RATELIMIT_STORAGE_URI"""
    limiter.init_app(app)

    if app.config.get('RATELIMIT_STORAGE_URI', 'memory://').startswith('memory://'):
        app.logger.warning("Rate limiting using in-memory storage - not suitable for multi-worker production")
    else:
        app.logger.info("Rate limiting using external storage backend")
    return limiter
