# Trackr_app/api_routes.py

import json
import logging

from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from pydantic import ValidationError

from .errors import InvalidTradeError
from .metrics_setup import record_trade_operation
from .rate_limiting import limiter, RATE_LIMITS
from .schemas import InsertTrade, UpdateTrade, dump_supplied
from .services.stats_service import StatsService
from .storage import TradeStorage
from .utils import parse_iso_datetime

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')

DEFAULT_TRADE_LIMIT = 10


def _validation_error(e: ValidationError):
    return jsonify({
        'message': 'Invalid trade data',
        'errors': json.loads(e.json(include_url=False)),
    }), 400


def _invalid_trade(e: InvalidTradeError):
    return jsonify({
        'message': 'Invalid trade data',
        'errors': [{'type': 'value_error', 'loc': [e.field], 'msg': str(e)}],
    }), 400


def _json_body():
    return request.get_json(silent=True) or {}


@api.route('/auth/user', methods=['GET'])
@login_required
def get_auth_user():
    try:
        user = TradeStorage().get_user(current_user.id)
        return jsonify(user.to_dict() if user else None)
    except Exception:
        logger.exception("Error fetching user")
        return jsonify({'message': 'Failed to fetch user'}), 500


@api.route('/trading/stats', methods=['GET'])
@login_required
@limiter.limit(RATE_LIMITS['read'])
def get_trading_stats():
    try:
        return jsonify(StatsService().get_trading_stats(current_user.id))
    except Exception:
        logger.exception("Error fetching trading stats")
        return jsonify({'message': 'Failed to fetch trading stats'}), 500


@api.route('/trades', methods=['GET'])
@login_required
@limiter.limit(RATE_LIMITS['read'])
def list_trades():
    """Latest trades (?limit=N, default 10), or all trades created in ?start=..&end=.."""
    start_arg = request.args.get('start')
    end_arg = request.args.get('end')

    try:
        if start_arg or end_arg:
            if not (start_arg and end_arg):
                return jsonify({'message': 'Both start and end are required'}), 400
            start, end = parse_iso_datetime(start_arg), parse_iso_datetime(end_arg)
        else:
            limit = int(request.args.get('limit', DEFAULT_TRADE_LIMIT))
            if limit < 1:
                raise ValueError(limit)
    except ValueError:
        return jsonify({'message': 'Invalid query parameters'}), 400

    try:
        storage = TradeStorage()
        if start_arg:
            trades = storage.list_trades_in_range(current_user.id, start, end)
        else:
            trades = storage.list_trades(current_user.id, limit)
        return jsonify([t.to_dict() for t in trades])
    except Exception:
        logger.exception("Error fetching trades")
        return jsonify({'message': 'Failed to fetch trades'}), 500


@api.route('/trades', methods=['POST'])
@login_required
@limiter.limit(RATE_LIMITS['write'])
def create_trade():
    try:
        payload = InsertTrade.model_validate(_json_body())
    except ValidationError as e:
        logger.info(f"Rejected trade payload: {e.error_count()} error(s)")
        return _validation_error(e)

    try:
        trade = TradeStorage().create_trade(current_user.id, dump_supplied(payload))
        record_trade_operation('create')
        return jsonify(trade.to_dict()), 201
    except InvalidTradeError as e:
        logger.info(f"Rejected trade: {e}")
        record_trade_operation('create', 'invalid')
        return _invalid_trade(e)
    except Exception:
        logger.exception("Error creating trade")
        record_trade_operation('create', 'error')
        return jsonify({'message': 'Failed to create trade'}), 500


@api.route('/trades/<trade_id>', methods=['PATCH'])
@login_required
@limiter.limit(RATE_LIMITS['write'])
def update_trade(trade_id):
    try:
        payload = UpdateTrade.model_validate(_json_body())
    except ValidationError as e:
        logger.info(f"Rejected trade update for {trade_id}: {e.error_count()} error(s)")
        return _validation_error(e)

    try:
        trade = TradeStorage().update_trade(trade_id, current_user.id, dump_supplied(payload))
    except InvalidTradeError as e:
        logger.info(f"Rejected trade update for {trade_id}: {e}")
        record_trade_operation('update', 'invalid')
        return _invalid_trade(e)
    except Exception:
        logger.exception("Error updating trade")
        record_trade_operation('update', 'error')
        return jsonify({'message': 'Failed to update trade'}), 500

    if trade is None:
        record_trade_operation('update', 'not_found')
        return jsonify({'message': 'Trade not found'}), 404

    record_trade_operation('update')
    return jsonify(trade.to_dict())


@api.route('/trades/<trade_id>', methods=['DELETE'])
@login_required
@limiter.limit(RATE_LIMITS['write'])
def delete_trade(trade_id):
    try:
        TradeStorage().delete_trade(trade_id, current_user.id)
        record_trade_operation('delete')
        return '', 204
    except Exception:
        logger.exception("Error deleting trade")
        record_trade_operation('delete', 'error')
        return jsonify({'message': 'Failed to delete trade'}), 500
