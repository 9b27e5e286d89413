"""
Shared fixtures: synthetic Yahoo chart payloads and a fake market source.
"""
import pytest

from config import DashboardConfig
from errors import TickerNotFoundError
from stats import Fundamentals

# 2020-01-02 00:00:00 UTC
START_TS = 1577923200
DAY = 86400


def make_payload(closes, volumes=None, start=START_TS):
    """Build a chart payload with one timestamp per close, a day apart."""
    timestamps = [start + i * DAY for i in range(len(closes))]
    quote = {"close": list(closes)}
    if volumes is not None:
        quote["volume"] = list(volumes)
    return {
        "chart": {
            "result": [{
                "meta": {"symbol": "TEST"},
                "timestamp": timestamps,
                "indicators": {"quote": [quote]},
            }],
            "error": None,
        }
    }


class FakeSource:
    """In-memory market source recording every call."""

    def __init__(self, payloads=None, fundamentals=None, search_results=None):
        self.payloads = payloads or {}
        self.fundamentals = fundamentals or {}
        self.search_results = search_results or {}
        self.calls = []

    def fetch_chart(self, ticker, range_="5y", interval="1d"):
        self.calls.append(("chart", ticker, range_, interval))
        if ticker not in self.payloads:
            raise TickerNotFoundError(ticker)
        return self.payloads[ticker]

    def fetch_fundamentals(self, ticker):
        self.calls.append(("fundamentals", ticker))
        return self.fundamentals.get(ticker, Fundamentals.unavailable())

    def search(self, query):
        self.calls.append(("search", query))
        return self.search_results.get(query)


@pytest.fixture
def small_config():
    """Short windows so scenarios stay readable."""
    return DashboardConfig(
        ma_windows=(5, 10),
        rsi_period=3,
        range_window=8,
        display_days=6,
        return_horizons=(1, 2),
        trading_days_per_year=10,
        history_tolerance=0.95,
    )


@pytest.fixture
def rising_prices():
    return [100.0 + i for i in range(1300)]


@pytest.fixture
def fake_source(rising_prices):
    return FakeSource(
        payloads={"AAPL": make_payload(rising_prices, [1000] * len(rising_prices))},
        fundamentals={"AAPL": Fundamentals(pe_ratio=28.5, peg_ratio=2.1, profit_margin=25.3)},
        search_results={"apple": ("AAPL", "Apple Inc.")},
    )
