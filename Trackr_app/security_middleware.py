# Trackr_app/security_middleware.py
"""
Security headers and middleware for hardening the application
"""

import os
from flask import request, abort


def setup_security_headers(app):

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer'
        response.headers['Permissions-Policy'] = 'camera=(), microphone=(), geolocation=()'
        response.headers['Content-Security-Policy'] = app.config.get(
            'SECURITY_CSP', os.environ.get('SECURITY_CSP', "default-src 'none'; frame-ancestors 'none'"))
        return response


def setup_request_size_limits(app):
    """Reject bodies above MAX_REQUEST_BYTES (64KB default, trade payloads are small)"""
    max_content_length = int(os.environ.get('MAX_REQUEST_BYTES', 64 * 1024))
    if app.config.get('MAX_CONTENT_LENGTH') is None:
        app.config['MAX_CONTENT_LENGTH'] = max_content_length

    @app.before_request
    def limit_request_size():
        limit = app.config['MAX_CONTENT_LENGTH']
        if request.content_length and request.content_length > limit:
            abort(413, "Request entity too large")


def setup_session_security(app):
    app.config.update(
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SECURE=os.environ.get('SESSION_SECURE', 'false').lower() == 'true',
        SESSION_COOKIE_SAMESITE='Lax',
    )


def setup_security_middleware(app):
    setup_security_headers(app)
    setup_request_size_limits(app)
    setup_session_security(app)

    app.logger.info("Security middleware configured", extra={
        'max_request_bytes': app.config.get('MAX_CONTENT_LENGTH'),
        'session_secure': app.config.get('SESSION_COOKIE_SECURE'),
    })
