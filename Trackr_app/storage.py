# Trackr_app/storage.py
"""
Trade and user persistence.

Every trade operation takes the owning user's id explicitly and folds it
into the filter, so nothing here depends on the request or login state.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime
from functools import wraps
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .errors import InvalidTradeError, StoreError
from .models import User, Trade, TradeDirection, TradeStatus
from .utils import CENTS, local_now

logger = logging.getLogger(__name__)

USER_FIELDS = ('id', 'email', 'first_name', 'last_name', 'profile_image_url')
TRADE_FIELDS = ('symbol', 'direction', 'quantity', 'entry_price', 'exit_price', 'notes', 'entry_time')
# fields whose change re-closes a trade and recomputes its pnl
PNL_FIELDS = ('direction', 'quantity', 'entry_price', 'exit_price')
# trades.pnl is NUMERIC(10, 2)
PNL_MAX = Decimal('99999999.99')


def calculate_pnl(direction: str, entry_price, exit_price, quantity: int) -> Decimal:
    """
    Long:  (exit - entry) * quantity
    Short: (entry - exit) * quantity
    """
    entry_price = Decimal(str(entry_price))
    exit_price = Decimal(str(exit_price))
    if direction == TradeDirection.LONG:
        pnl = (exit_price - entry_price) * quantity
    else:
        pnl = (entry_price - exit_price) * quantity
    return pnl.quantize(CENTS, rounding=ROUND_HALF_UP)


def _checked_pnl(direction, entry_price, exit_price, quantity) -> Decimal:
    pnl = calculate_pnl(direction, entry_price, exit_price, quantity)
    if abs(pnl) > PNL_MAX:
        raise InvalidTradeError('pnl', f"pnl {pnl} exceeds the storable range of +/-{PNL_MAX}")
    return pnl


def _store_operation(func):
    """Roll back and re-raise persistence failures as StoreError"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Store operation {func.__name__} failed: {e}")
            raise StoreError(func.__name__) from e
    return wrapper


class TradeStorage:
    """Stateless repository over the users and trades tables"""

    # ---------- users ----------
    @_store_operation
    def get_user(self, user_id: str) -> Optional[User]:
        return db.session.get(User, user_id)

    @_store_operation
    def upsert_user(self, data: Dict[str, Any]) -> User:
        """Insert the user, or overwrite every supplied field if the id exists"""
        values = {k: v for k, v in data.items() if k in USER_FIELDS}
        user = db.session.get(User, values['id']) if values.get('id') else None

        if user is None:
            user = User(**values)
            db.session.add(user)
        else:
            for key, value in values.items():
                setattr(user, key, value)
            user.updated_at = local_now()

        db.session.commit()
        return user

    # ---------- trades ----------
    @_store_operation
    def list_trades(self, user_id: str, limit: int = 10) -> List[Trade]:
        """Newest trades first, truncated to ``limit``"""
        return (
            Trade.query
            .filter_by(user_id=user_id)
            .order_by(Trade.created_at.desc())
            .limit(limit)
            .all()
        )

    @_store_operation
    def list_trades_in_range(self, user_id: str, start: datetime, end: datetime) -> List[Trade]:
        """Trades created within [start, end], newest first"""
        return (
            Trade.query
            .filter(
                Trade.user_id == user_id,
                Trade.created_at >= start,
                Trade.created_at <= end,
            )
            .order_by(Trade.created_at.desc())
            .all()
        )

    @_store_operation
    def create_trade(self, user_id: str, data: Dict[str, Any]) -> Trade:
        values = {k: v for k, v in data.items() if k in TRADE_FIELDS}
        now = local_now()

        pnl = None
        if values.get('exit_price') is not None:
            pnl = _checked_pnl(values['direction'], values['entry_price'], values['exit_price'], values['quantity'])

        trade = Trade(user_id=user_id, created_at=now, updated_at=now, **values)
        if trade.entry_time is None:
            trade.entry_time = now

        if trade.exit_price is not None:
            trade.pnl = pnl
            trade.status = TradeStatus.CLOSED
            trade.exit_time = now
        else:
            trade.pnl = None
            trade.status = TradeStatus.OPEN
            trade.exit_time = None

        db.session.add(trade)
        db.session.commit()
        logger.info(f"Created {trade.status} trade {trade.id} for user {user_id}")
        return trade

    @_store_operation
    def update_trade(self, trade_id: str, user_id: str, data: Dict[str, Any]) -> Optional[Trade]:
        """
        Apply the supplied fields. When both prices end up known and the
        update touched price, quantity or direction, the trade is (re)closed:
        pnl is recomputed and exit_time stamped now. Returns None when no
        trade matches (trade_id, user_id).
        """
        trade = Trade.query.filter_by(id=trade_id, user_id=user_id).first()
        if trade is None:
            return None

        values = {k: v for k, v in data.items() if k in TRADE_FIELDS}
        merged = {field: values.get(field, getattr(trade, field)) for field in PNL_FIELDS}

        pnl = None
        touches_pnl = any(field in values for field in PNL_FIELDS)
        if touches_pnl and merged['entry_price'] is not None and merged['exit_price'] is not None:
            # checked before any attribute changes so a rejected update leaves the row untouched
            pnl = _checked_pnl(merged['direction'], merged['entry_price'], merged['exit_price'], merged['quantity'])

        for key, value in values.items():
            setattr(trade, key, value)

        now = local_now()
        if pnl is not None:
            trade.pnl = pnl
            trade.status = TradeStatus.CLOSED
            trade.exit_time = now

        trade.updated_at = now
        db.session.commit()
        logger.info(f"Updated trade {trade.id} for user {user_id} ({trade.status})")
        return trade

    @_store_operation
    def delete_trade(self, trade_id: str, user_id: str) -> None:
        """Delete the user's trade; zero matching rows is not an error"""
        deleted = Trade.query.filter_by(id=trade_id, user_id=user_id).delete(synchronize_session=False)
        db.session.commit()
        logger.info(f"Deleted {deleted} trade(s) id={trade_id} for user {user_id}")

    # ---------- counts (used by StatsService) ----------
    @_store_operation
    def count_trades(self, user_id: str, start: Optional[datetime] = None, end: Optional[datetime] = None) -> int:
        """Count the user's trades, optionally within [start, end] on created_at"""
        query = Trade.query.filter(Trade.user_id == user_id)
        if start is not None:
            query = query.filter(Trade.created_at >= start)
        if end is not None:
            query = query.filter(Trade.created_at <= end)
        return query.count()

    @_store_operation
    def list_closed_trades(self, user_id: str) -> List[Trade]:
        return Trade.query.filter_by(user_id=user_id, status=TradeStatus.CLOSED).all()
