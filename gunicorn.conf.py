#!/usr/bin/env python3
"""
Gunicorn configuration for TradeTrackr

Usage:
    gunicorn -c gunicorn.conf.py run:app
"""

import multiprocessing
import os

# =============================================================================
# Server
# =============================================================================

# Bind to localhost only - put a reverse proxy in front for external access
bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:8000")

# (2 x CPU cores) + 1, capped for a single small server
workers = min(multiprocessing.cpu_count() * 2 + 1, 4)
worker_class = "sync"
threads = 2

# =============================================================================
# Worker lifecycle
# =============================================================================

max_requests = 1000
max_requests_jitter = 100
timeout = 30
graceful_timeout = 30
keepalive = 5

# create_app() runs db.create_all() once in the master
preload_app = True

# =============================================================================
# Logging
# =============================================================================

access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

proc_name = "tradetrackr"

# =============================================================================
# Request limits
# =============================================================================

limit_request_line = 4094
limit_request_field_size = 8190
limit_request_fields = 100


def on_starting(server):
    server.log.info("Starting TradeTrackr")
    if os.environ.get('ENABLE_METRICS', '').lower() == 'true':
        multiproc_dir = os.environ.get('PROMETHEUS_MULTIPROC_DIR', '/tmp/prometheus_multiproc')
        os.makedirs(multiproc_dir, exist_ok=True)
        server.log.info(f"Prometheus multiprocess directory: {multiproc_dir}")


def when_ready(server):
    server.log.info("TradeTrackr is ready to accept connections")


def on_exit(server):
    server.log.info("TradeTrackr is shutting down")
