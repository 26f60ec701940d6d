# Trackr_app/metrics_setup.py
"""
Prometheus metrics setup
"""

import os
import time
from flask import g, request
from prometheus_client import Counter, Histogram, Info

# Module level: prometheus_client's default registry rejects duplicate names
REQUEST_COUNT = Counter(
    'trackr_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)
REQUEST_LATENCY = Histogram(
    'trackr_http_request_duration_seconds',
    'HTTP request latency',
    ['method', 'endpoint']
)
TRADE_OPERATIONS = Counter(
    'trackr_trade_operations_total',
    'Trade repository operations served over the API',
    ['operation', 'status']
)
APP_INFO = Info('trackr_app', 'Application information')


def record_trade_operation(operation: str, status: str = 'ok'):
    TRADE_OPERATIONS.labels(operation=operation, status=status).inc()


def metrics_enabled() -> bool:
    return os.environ.get('ENABLE_METRICS', '').lower() == 'true'


def setup_metrics(app):
    """Install request timing hooks when ENABLE_METRICS is on"""
    app.config.setdefault('ENABLE_METRICS', metrics_enabled())
    if not app.config['ENABLE_METRICS']:
        app.logger.info("Metrics disabled - set ENABLE_METRICS=true to enable")
        return False

    APP_INFO.info({
        'version': os.environ.get('APP_VERSION', 'unknown'),
        'environment': os.environ.get('FLASK_ENV', 'unknown'),
    })

    @app.before_request
    def start_timer():
        g.start_time = time.time()

    @app.after_request
    def record_request(response):
        if hasattr(g, 'start_time'):
            endpoint = request.endpoint or 'unknown'
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()
            REQUEST_LATENCY.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - g.start_time)
        return response

    app.logger.info("Prometheus metrics initialized")
    return True
