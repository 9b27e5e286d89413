"""
Stats aggregation: one StatisticsRecord per load, built from the full
(untruncated) price history plus fundamentals fetched elsewhere.
"""
from dataclasses import dataclass

import indicators
from config import DashboardConfig
from errors import InsufficientHistoryError


@dataclass(frozen=True)
class Fundamentals:
    pe_ratio: float = None
    peg_ratio: float = None
    profit_margin: float = None  # percent, already scaled ×100

    @classmethod
    def unavailable(cls):
        return cls()


@dataclass(frozen=True)
class StatisticsRecord:
    current_price: float
    price_change: float
    price_change_pct: float
    current_mas: dict
    high_52w: float
    low_52w: float
    rsi: float
    rsi_signal: str
    returns: dict
    pe_ratio: float = None
    peg_ratio: float = None
    profit_margin: float = None

    def to_dict(self):
        d = {
            "current_price": self.current_price,
            "price_change": self.price_change,
            "price_change_pct": self.price_change_pct,
            "current_mas": {str(w): v for w, v in self.current_mas.items()},
            "high_52w": self.high_52w,
            "low_52w": self.low_52w,
            "rsi": self.rsi,
            "rsi_signal": self.rsi_signal,
            "pe_ratio": self.pe_ratio,
            "peg_ratio": self.peg_ratio,
            "profit_margin": self.profit_margin,
        }
        for years, value in self.returns.items():
            d[f"return_{years}y"] = value
        return d


def require_history(prices, config):
    """Gate the whole load on the longest moving-average window."""
    if len(prices) < config.min_history:
        raise InsufficientHistoryError(config.min_history, len(prices))


def aggregate(prices, moving_averages, fundamentals=None, config=None):
    """Compute the stat panel over the full history.

    The caller must have run require_history first; this function assumes
    at least two closes.
    """
    config = config or DashboardConfig()
    fundamentals = fundamentals or Fundamentals.unavailable()

    change, change_pct = indicators.day_change(prices)
    high, low = indicators.trailing_range(prices, config.range_window)
    rsi_value = indicators.rsi(prices, config.rsi_period)

    return StatisticsRecord(
        current_price=prices[-1],
        price_change=change,
        price_change_pct=change_pct,
        current_mas={w: series[-1] if series else None for w, series in moving_averages.items()},
        high_52w=high,
        low_52w=low,
        rsi=rsi_value,
        rsi_signal=indicators.rsi_signal(rsi_value, config.rsi_overbought, config.rsi_oversold),
        returns=indicators.horizon_returns(
            prices, config.return_horizons,
            config.trading_days_per_year, config.history_tolerance,
        ),
        pe_ratio=fundamentals.pe_ratio,
        peg_ratio=fundamentals.peg_ratio,
        profit_margin=fundamentals.profit_margin,
    )
