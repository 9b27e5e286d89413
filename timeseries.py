"""
Turns a raw Yahoo chart payload into aligned daily arrays, and trims
computed arrays down to the chart's display window.
"""
from dataclasses import dataclass, asdict
from datetime import datetime, timezone

from errors import NoDataError, UpstreamError


@dataclass(frozen=True)
class PricePoint:
    date: str
    close: float
    volume: int

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class AlignedSeries:
    dates: list
    prices: list
    volumes: list

    def __len__(self):
        return len(self.prices)

    def latest(self):
        """Most recent aligned day, or None for an empty series."""
        if not self.prices:
            return None
        return PricePoint(self.dates[-1], self.prices[-1], self.volumes[-1])


@dataclass(frozen=True)
class ChartData:
    dates: list
    prices: list
    moving_averages: dict

    def to_dict(self):
        return {
            "dates": self.dates,
            "prices": self.prices,
            "moving_averages": {str(w): s for w, s in self.moving_averages.items()},
        }


def epoch_to_date(ts):
    """Epoch seconds → 'YYYY-MM-DD' in UTC, time of day dropped."""
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d")


# ── Series Aligner ────────────────────────────────────────

def align_arrays(timestamps, closes, volumes=None):
    """Pair timestamps with closes, skipping any day whose close is missing.

    No carry-forward or interpolation: a missing close drops the whole day.
    Missing volumes become 0.
    """
    volumes = volumes or []
    dates, prices, vols = [], [], []
    for i, ts in enumerate(timestamps):
        close = closes[i] if i < len(closes) else None
        if close is None:
            continue
        vol = volumes[i] if i < len(volumes) else None
        dates.append(epoch_to_date(ts))
        prices.append(float(close))
        vols.append(int(vol) if vol else 0)
    return AlignedSeries(dates, prices, vols)


def _section(value):
    """A payload object that may be absent (None) but must otherwise be a dict."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise UpstreamError(description="Failed to fetch data.")
    return value


def align_series(payload):
    """Align a full chart payload (chart.result[0]) into an AlignedSeries.

    An empty result is NoDataError; anything not shaped like a chart
    payload is UpstreamError.
    """
    chart = _section(_section(payload).get("chart"))
    results = chart.get("result")
    if not results:
        raise NoDataError()
    if not isinstance(results, list):
        raise UpstreamError(description="Failed to fetch data.")
    result = results[0]
    if not isinstance(result, dict):
        raise UpstreamError(description="Failed to fetch data.")

    quotes = _section(result.get("indicators")).get("quote") or [{}]
    if not isinstance(quotes, list):
        raise UpstreamError(description="Failed to fetch data.")
    quote = _section(quotes[0])
    timestamps = result.get("timestamp") or []
    closes = quote.get("close") or []
    if timestamps and not closes:
        raise NoDataError()

    try:
        return align_arrays(timestamps, closes, quote.get("volume"))
    except (TypeError, ValueError, OverflowError):
        raise UpstreamError(description="Failed to fetch data.")


# ── Display windowing ─────────────────────────────────────

def window_for_display(dates, prices, moving_averages, days):
    """Keep the trailing `days` points of every array.

    Must run after all indicators are computed on the full history.
    """
    if days <= 0:
        return ChartData([], [], {w: [] for w in moving_averages})
    return ChartData(
        dates=list(dates[-days:]),
        prices=list(prices[-days:]),
        moving_averages={w: list(s[-days:]) for w, s in moving_averages.items()},
    )
