"""
Market data sources.

Both sources expose the same three calls:
  - fetch_chart(ticker, range_, interval) -> Yahoo v8 chart payload (dict)
  - fetch_fundamentals(ticker)            -> Fundamentals (never raises)
  - search(query)                         -> (symbol, name) or None

YahooFinanceClient talks to the public Yahoo endpoints directly;
YFinanceSource goes through the yfinance library and reshapes its
DataFrame into the same chart payload so the rest of the pipeline
doesn't care which one is active.
"""
import math
import logging
from datetime import datetime, timezone

import requests
import yfinance as yf

from errors import TickerNotFoundError, NoDataError, UpstreamError, NetworkError
from stats import Fundamentals

YAHOO_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
YAHOO_SEARCH_URL = "https://query1.finance.yahoo.com/v1/finance/search"
YAHOO_QUOTE_SUMMARY_URL = "https://query1.finance.yahoo.com/v10/finance/quoteSummary"

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def _number(value):
    """Yahoo sends either a bare number or {"raw": 12.3, "fmt": "12.30"}."""
    if isinstance(value, dict):
        value = value.get("raw")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value):
        return None
    return float(value)


def _utc_midnight(idx):
    """Epoch seconds for 00:00 UTC on the bar's own calendar day.

    yfinance stamps daily bars at midnight in the exchange's timezone, which
    falls on the previous UTC day for markets east of UTC.
    """
    return int(datetime(idx.year, idx.month, idx.day, tzinfo=timezone.utc).timestamp())


def fundamentals_from_summary(data):
    """Pull P/E, PEG and profit margin out of a quoteSummary response."""
    summary = (data or {}).get("quoteSummary") or {}
    if summary.get("error"):
        logging.warning(f"Yahoo Finance fundamentals error: {summary['error']}")
        return Fundamentals.unavailable()

    results = summary.get("result") or []
    if not results:
        return Fundamentals.unavailable()
    result = results[0] or {}

    detail = result.get("summaryDetail") or {}
    key_stats = result.get("defaultKeyStatistics") or {}
    margin = _number(key_stats.get("profitMargins"))

    return Fundamentals(
        pe_ratio=_number(detail.get("trailingPE")),
        peg_ratio=_number(key_stats.get("pegRatio")),
        profit_margin=margin * 100 if margin is not None else None,
    )


# ── Yahoo Finance over HTTP ───────────────────────────────

class YahooFinanceClient:
    def __init__(self, timeout=10, session=None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def _get(self, url, params=None):
        try:
            return self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logging.error(f"Fetch error for {url}: {e}")
            raise NetworkError()

    def fetch_chart(self, ticker, range_="5y", interval="1d"):
        response = self._get(
            f"{YAHOO_CHART_URL}/{ticker}",
            params={"range": range_, "interval": interval},
        )
        if not response.ok:
            if response.status_code == 404:
                raise TickerNotFoundError(ticker)
            raise UpstreamError(status=response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise UpstreamError(description="Failed to fetch data.")

        chart = data.get("chart") if isinstance(data, dict) else None
        if not isinstance(chart, dict):
            raise UpstreamError(description="Failed to fetch data.")
        error = chart.get("error")
        if error:
            description = error.get("description") if isinstance(error, dict) else str(error)
            raise UpstreamError(description=description or "Failed to fetch data.")
        if not chart.get("result"):
            raise NoDataError()
        return data

    def fetch_fundamentals(self, ticker):
        try:
            response = self.session.get(
                f"{YAHOO_QUOTE_SUMMARY_URL}/{ticker}",
                params={"modules": "defaultKeyStatistics,summaryDetail"},
                timeout=self.timeout,
            )
            if not response.ok:
                logging.warning(f"Yahoo Finance fundamentals error: {response.status_code}")
                return Fundamentals.unavailable()
            return fundamentals_from_summary(response.json())
        except Exception as e:
            logging.warning(f"Fundamentals fetch failed for {ticker}: {e}")
            return Fundamentals.unavailable()

    def search(self, query):
        try:
            response = self.session.get(
                YAHOO_SEARCH_URL,
                params={"q": query, "quotesCount": 1, "newsCount": 0},
                timeout=self.timeout,
            )
            if not response.ok:
                return None
            quotes = response.json().get("quotes") or []
        except Exception as e:
            logging.warning(f"Search error for {query!r}: {e}")
            return None

        if not quotes:
            return None
        quote = quotes[0]
        symbol = quote.get("symbol")
        if not symbol:
            return None
        return symbol, quote.get("shortname") or quote.get("longname") or symbol


# ── yfinance ──────────────────────────────────────────────

class YFinanceSource:
    def __init__(self, ticker_factory=yf.Ticker, search_factory=yf.Search):
        self.ticker_factory = ticker_factory
        self.search_factory = search_factory

    def fetch_chart(self, ticker, range_="5y", interval="1d"):
        try:
            hist = self.ticker_factory(ticker).history(period=range_, interval=interval)
        except Exception as e:
            logging.error(f"yfinance history failed for {ticker}: {e}")
            raise UpstreamError(description="Failed to fetch data.")

        if hist.empty:
            raise TickerNotFoundError(ticker)

        timestamps, closes, volumes = [], [], []
        for idx, row in hist.iterrows():
            close = float(row["Close"])
            volume = float(row["Volume"])
            timestamps.append(_utc_midnight(idx))
            closes.append(None if math.isnan(close) else close)
            volumes.append(0 if math.isnan(volume) else int(volume))

        return {
            "chart": {
                "result": [{
                    "meta": {"symbol": ticker},
                    "timestamp": timestamps,
                    "indicators": {"quote": [{"close": closes, "volume": volumes}]},
                }],
                "error": None,
            }
        }

    def fetch_fundamentals(self, ticker):
        try:
            info = self.ticker_factory(ticker).info or {}
        except Exception as e:
            logging.warning(f"yfinance info failed for {ticker}: {e}")
            return Fundamentals.unavailable()

        margin = _number(info.get("profitMargins"))
        return Fundamentals(
            pe_ratio=_number(info.get("trailingPE")),
            peg_ratio=_number(info.get("pegRatio") or info.get("trailingPegRatio")),
            profit_margin=margin * 100 if margin is not None else None,
        )

    def search(self, query):
        try:
            quotes = self.search_factory(query, max_results=1, news_count=0).quotes
        except Exception as e:
            logging.warning(f"yfinance search failed for {query!r}: {e}")
            return None
        if not quotes:
            return None
        quote = quotes[0]
        symbol = quote.get("symbol")
        if not symbol:
            return None
        return symbol, quote.get("shortname") or quote.get("longname") or symbol


def make_source(config):
    if config.source == "yfinance":
        return YFinanceSource()
    return YahooFinanceClient(timeout=config.request_timeout)
