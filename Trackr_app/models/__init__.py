from .user import User
from .trade import Trade, TradeDirection, TradeStatus

__all__ = ['User', 'Trade', 'TradeDirection', 'TradeStatus']
