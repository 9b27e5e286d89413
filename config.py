"""
Dashboard settings.

Every knob the indicator pipeline depends on is read from the environment
once at import, then gathered into a DashboardConfig that is passed
explicitly through the load cycle.
"""
import os
from dataclasses import dataclass, asdict

from errors import ConfigError


def _int_list(value):
    return tuple(int(v) for v in value.split(",") if v.strip())


# ── Environment ───────────────────────────────────────────

MA_WINDOWS = _int_list(os.environ.get("MA_WINDOWS", "200,365"))
RSI_PERIOD = int(os.environ.get("RSI_PERIOD", "14"))
RANGE_WINDOW = int(os.environ.get("RANGE_WINDOW", "252"))
DISPLAY_DAYS = int(os.environ.get("DISPLAY_DAYS", "500"))
RETURN_HORIZONS = _int_list(os.environ.get("RETURN_HORIZONS", "1,3,5"))
TRADING_DAYS_PER_YEAR = int(os.environ.get("TRADING_DAYS_PER_YEAR", "250"))
HISTORY_TOLERANCE = float(os.environ.get("HISTORY_TOLERANCE", "0.95"))
HISTORY_RANGE = os.environ.get("HISTORY_RANGE", "5y")
HISTORY_INTERVAL = os.environ.get("HISTORY_INTERVAL", "1d")
RSI_OVERBOUGHT = float(os.environ.get("RSI_OVERBOUGHT", "70"))
RSI_OVERSOLD = float(os.environ.get("RSI_OVERSOLD", "30"))

MARKET_DATA_SOURCE = os.environ.get("MARKET_DATA_SOURCE", "yahoo").lower()
REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "10"))


@dataclass(frozen=True)
class DashboardConfig:
    ma_windows: tuple = (200, 365)
    rsi_period: int = 14
    range_window: int = 252
    display_days: int = 500
    return_horizons: tuple = (1, 3, 5)
    trading_days_per_year: int = 250
    history_tolerance: float = 0.95
    history_range: str = "5y"
    history_interval: str = "1d"
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    source: str = "yahoo"
    request_timeout: float = 10.0

    @classmethod
    def from_env(cls):
        return cls(
            ma_windows=MA_WINDOWS,
            rsi_period=RSI_PERIOD,
            range_window=RANGE_WINDOW,
            display_days=DISPLAY_DAYS,
            return_horizons=RETURN_HORIZONS,
            trading_days_per_year=TRADING_DAYS_PER_YEAR,
            history_tolerance=HISTORY_TOLERANCE,
            history_range=HISTORY_RANGE,
            history_interval=HISTORY_INTERVAL,
            rsi_overbought=RSI_OVERBOUGHT,
            rsi_oversold=RSI_OVERSOLD,
            source=MARKET_DATA_SOURCE,
            request_timeout=REQUEST_TIMEOUT,
        ).validate()

    @property
    def min_history(self):
        """Samples needed before any indicator runs: the longest MA window."""
        return max(self.ma_windows)

    def validate(self):
        if not self.ma_windows:
            raise ConfigError("At least one moving-average window is required")
        for name, values in (("ma_windows", self.ma_windows),
                             ("return_horizons", self.return_horizons)):
            bad = [v for v in values if v <= 0]
            if bad:
                raise ConfigError(f"{name} must be positive, got {bad}")
        for name in ("rsi_period", "range_window", "trading_days_per_year"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if not 0 < self.history_tolerance <= 1:
            raise ConfigError(f"history_tolerance must be in (0, 1], got {self.history_tolerance}")
        if self.source not in ("yahoo", "yfinance"):
            raise ConfigError(f"Unknown market data source: {self.source}")
        return self

    def to_dict(self):
        d = asdict(self)
        d["ma_windows"] = list(self.ma_windows)
        d["return_horizons"] = list(self.return_horizons)
        d["min_history"] = self.min_history
        return d
