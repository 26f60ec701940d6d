# Trackr_app/logging_config.py
"""
Structured JSON logging configuration with request ID propagation and secret filtering
"""

import re
import logging
import os
import uuid
from flask import request, g, has_request_context
from pythonjsonlogger.json import JsonFormatter


class SecretMaskingFilter(logging.Filter):
    """Filter to mask secrets in log messages"""

    SECRET_PATTERNS = [
        re.compile(r'(client_secret|secret|password|token|authorization)[\'"]*\s*[:=]\s*[\'"]?([^\'",\s&]+)', re.IGNORECASE),
        re.compile(r'("client_secret"|"secret"|"password"|"token"|"access_token"|"id_token"|"authorization")\s*:\s*"([^"]+)"', re.IGNORECASE),
    ]

    @classmethod
    def mask(cls, text: str) -> str:
        for pattern in cls.SECRET_PATTERNS:
            text = pattern.sub(r'\1: ****', text)
        return text

    def filter(self, record):
        record.msg = self.mask(str(record.msg))
        if record.args:
            record.args = tuple(
                self.mask(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


class RequestIDFormatter(JsonFormatter):
    """JSON formatter that adds request context when there is one"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = self.formatTime(record, self.datefmt)

        if has_request_context():
            log_record['request_id'] = getattr(g, 'request_id', None)
            log_record['path'] = request.path
            log_record['method'] = request.method
            log_record['remote_addr'] = request.remote_addr
            # only a user Flask-Login already loaded; loading here could recurse into logging
            user = g.get('_login_user')
            if user is not None and user.is_authenticated:
                log_record['user_id'] = user.id


def setup_logging(app):
    """Attach the JSON handler to app.logger (the Trackr_app logger every module logs under)"""
    formatter = RequestIDFormatter(
        '%(timestamp)s %(levelname)s %(name)s %(message)s',
        rename_fields={
            'levelname': 'level',
            'name': 'logger',
        }
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(SecretMaskingFilter())

    log_level = app.config.get('LOG_LEVEL') or os.environ.get('LOG_LEVEL', 'INFO')
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    handler.setLevel(level)

    app.logger.handlers = [handler]
    app.logger.setLevel(level)
    app.logger.propagate = False

    app.logger.info("Structured JSON logging configured", extra={
        'log_level': logging.getLevelName(level),
    })


def generate_request_id():
    return str(uuid.uuid4())


def setup_request_id_middleware(app):
    """Generate or accept X-Request-ID and echo it back"""

    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or generate_request_id()

    @app.after_request
    def add_request_id_header(response):
        if hasattr(g, 'request_id'):
            response.headers['X-Request-ID'] = g.request_id
        return response
