# Trackr_app/models/trade.py

import uuid

from Trackr_app.extensions import db
from Trackr_app.utils import local_now, isoformat, format_decimal


class TradeDirection:
    LONG = 'long'
    SHORT = 'short'

    ALL = (LONG, SHORT)


class TradeStatus:
    OPEN = 'open'
    CLOSED = 'closed'


class Trade(db.Model):
    """A single position in a user's trade log"""
    __tablename__ = 'trades'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(255), db.ForeignKey('users.id'), nullable=False)
    symbol = db.Column(db.String(50), nullable=False)
    direction = db.Column(db.String(10), nullable=False)  # long / short
    quantity = db.Column(db.Integer, nullable=False)
    entry_price = db.Column(db.Numeric(10, 2), nullable=False)
    exit_price = db.Column(db.Numeric(10, 2), nullable=True)
    pnl = db.Column(db.Numeric(10, 2), nullable=True)
    status = db.Column(db.String(10), nullable=False, default=TradeStatus.OPEN)  # open / closed
    notes = db.Column(db.Text, nullable=True)
    entry_time = db.Column(db.DateTime, default=local_now)
    exit_time = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=local_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=local_now, nullable=False)

    __table_args__ = (
        db.CheckConstraint("direction IN ('long', 'short')", name='ck_trades_direction'),
        db.CheckConstraint("status IN ('open', 'closed')", name='ck_trades_status'),
        db.Index('idx_trades_user_created', 'user_id', 'created_at'),
        db.Index('idx_trades_user_status', 'user_id', 'status'),
    )

    @property
    def is_closed(self):
        return self.status == TradeStatus.CLOSED

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'symbol': self.symbol,
            'type': self.direction,
            'quantity': self.quantity,
            'entryPrice': format_decimal(self.entry_price),
            'exitPrice': format_decimal(self.exit_price),
            'pnl': format_decimal(self.pnl),
            'status': self.status,
            'notes': self.notes,
            'entryTime': isoformat(self.entry_time),
            'exitTime': isoformat(self.exit_time),
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Trade {self.id} {self.symbol} {self.direction} {self.status}>'
