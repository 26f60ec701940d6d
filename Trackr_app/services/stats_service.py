# Trackr_app/services/stats_service.py

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from ..storage import TradeStorage
from ..utils import day_bounds, round2

logger = logging.getLogger(__name__)


class StatsService:
    """
    Trading statistics for the dashboard.

    - todayTrades / yesterdayTrades: trades created in [today, tomorrow] and
      [yesterday, today]. Both windows are inclusive, so a trade created
      exactly at midnight is counted in both.
    - totalTrades: all of the user's trades
    - winRate: share of closed trades with pnl > 0, in percent
    - totalPnL: sum of pnl over closed trades
    """

    def __init__(self, storage: Optional[TradeStorage] = None):
        self.storage = storage or TradeStorage()

    def get_trading_stats(self, user_id: str, now: Optional[datetime] = None) -> Dict:
        yesterday, today, tomorrow = day_bounds(now)

        today_trades = self.storage.count_trades(user_id, today, tomorrow)
        yesterday_trades = self.storage.count_trades(user_id, yesterday, today)
        total_trades = self.storage.count_trades(user_id)

        closed_trades = self.storage.list_closed_trades(user_id)
        winning = [t for t in closed_trades if t.pnl is not None and t.pnl > 0]

        win_rate = (len(winning) / len(closed_trades) * 100) if closed_trades else 0
        total_pnl = sum((t.pnl or Decimal('0') for t in closed_trades), Decimal('0'))

        stats = {
            'todayTrades': today_trades,
            'yesterdayTrades': yesterday_trades,
            'totalTrades': total_trades,
            'winRate': round2(win_rate),
            'totalPnL': round2(total_pnl),
        }
        logger.debug(f"Trading stats for user {user_id}: {stats}")
        return stats
