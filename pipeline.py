"""
One dashboard load: resolve the query, fetch price history and
fundamentals in parallel, gate on history length, compute indicators on
the full series, then trim for the chart.
"""
import re
import itertools
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import indicators
from config import DashboardConfig
from errors import InvalidQueryError
from stats import Fundamentals, aggregate, require_history
from timeseries import PricePoint, align_series, window_for_display

# A ticker is 1-5 uppercase letters; anything else is treated as a company name.
_TICKER_RE = re.compile(r"^[A-Z]{1,5}$")

_load_ids = itertools.count(1)


@dataclass(frozen=True)
class LoadContext:
    """Identity of a single load.

    load_id increases with every load started in this process, so a client
    with overlapping requests can keep only the newest result.
    """
    load_id: int
    query: str
    ticker: str
    display_name: str

    @property
    def label(self):
        if self.display_name and self.display_name != self.ticker:
            return f"{self.display_name} ({self.ticker})"
        return self.ticker

    def to_dict(self):
        return {
            "load_id": self.load_id,
            "query": self.query,
            "ticker": self.ticker,
            "name": self.display_name,
            "label": self.label,
        }


@dataclass(frozen=True)
class DashboardResult:
    context: LoadContext
    stats: object
    chart: object
    data_points: int
    latest: PricePoint

    def to_dict(self):
        d = self.context.to_dict()
        d["stats"] = self.stats.to_dict()
        d["chart"] = self.chart.to_dict()
        d["data_points"] = self.data_points
        d["as_of"] = self.latest.date
        d["latest"] = self.latest.to_dict()
        return d


def new_context(query, ticker, display_name=None):
    return LoadContext(next(_load_ids), query, ticker, display_name or ticker)


def is_likely_ticker(query):
    return bool(_TICKER_RE.match(query))


def resolve_query(query, source):
    """Map user input to (ticker, display_name)."""
    query = (query or "").strip()
    if not query:
        raise InvalidQueryError("Please enter a ticker symbol or stock name")

    if is_likely_ticker(query):
        return query, query

    found = source.search(query)
    if found:
        return found

    ticker = re.sub(r"[^A-Z]", "", query.upper())
    if not ticker:
        raise InvalidQueryError(f"No stock found for '{query}'")
    return ticker, query.upper()


def compute_dashboard(payload, fundamentals, config, context):
    """Pure core: chart payload + fundamentals + config → DashboardResult.

    Raises InsufficientHistoryError before any indicator runs when the
    history is shorter than the longest moving-average window.
    """
    series = align_series(payload)
    require_history(series.prices, config)

    mas = indicators.moving_averages(series.prices, config.ma_windows)
    stats = aggregate(series.prices, mas, fundamentals, config)
    chart = window_for_display(series.dates, series.prices, mas, config.display_days)
    return DashboardResult(context, stats, chart, len(series), series.latest())


def fetch_all(source, ticker, config):
    """Fetch chart and fundamentals concurrently and join both."""
    with ThreadPoolExecutor(max_workers=2) as pool:
        chart_future = pool.submit(
            source.fetch_chart, ticker, config.history_range, config.history_interval
        )
        fundamentals_future = pool.submit(source.fetch_fundamentals, ticker)
        payload = chart_future.result()
        fundamentals = fundamentals_future.result()
    return payload, fundamentals or Fundamentals.unavailable()


def load_dashboard(query, source, config=None, name=None):
    config = config or DashboardConfig()
    ticker, display_name = resolve_query(query, source)
    context = new_context(query, ticker, name or display_name)
    logging.info(f"Load #{context.load_id}: {context.label}")

    payload, fundamentals = fetch_all(source, ticker, config)
    return compute_dashboard(payload, fundamentals, config, context)
