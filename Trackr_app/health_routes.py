# Trackr_app/health_routes.py
"""
Health endpoints for operational monitoring
"""

import os
from datetime import datetime, timezone
from flask import Blueprint, jsonify, current_app

from .extensions import db

health_bp = Blueprint('health', __name__)

SERVICE_NAME = 'tradetrackr'


def _utc_timestamp():
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


@health_bp.route('/healthz', methods=['GET'])
def health_check():
    """Fast in-process check: ok + version + time, no external calls"""
    return jsonify({
        'status': 'ok',
        'version': os.environ.get('APP_VERSION', 'unknown'),
        'timestamp': _utc_timestamp(),
        'service': SERVICE_NAME,
    })


@health_bp.route('/livez', methods=['GET'])
def liveness_check():
    return jsonify({
        'status': 'ok',
        'timestamp': _utc_timestamp(),
    })


@health_bp.route('/readyz', methods=['GET'])
def readiness_check():
    """Ready when the database answers SELECT 1"""
    checks = {'database': False}

    try:
        db.session.execute(db.text('SELECT 1'))
        checks['database'] = True
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Database health check failed: {e}")

    overall_status = 'ok' if all(checks.values()) else 'error'
    return jsonify({
        'status': overall_status,
        'timestamp': _utc_timestamp(),
        'checks': checks,
    }), 200 if overall_status == 'ok' else 503
