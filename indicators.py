"""
Technical indicators over a full daily close series.

Everything here is a pure function of a list of closes. Numeric edge
cases (short history, zero average loss, non-positive reference price)
come back as None or 100.0 instead of raising.
"""
import math


# ── Moving averages ───────────────────────────────────────

def moving_average(prices, window):
    """Simple moving average, aligned 1:1 with `prices`.

    Index i is None until `window` closes (inclusive) are available.
    """
    ma = []
    for i in range(len(prices)):
        if i < window - 1:
            ma.append(None)
        else:
            ma.append(sum(prices[i - window + 1:i + 1]) / window)
    return ma


def moving_averages(prices, windows):
    return {w: moving_average(prices, w) for w in windows}


# ── RSI ───────────────────────────────────────────────────

def rsi(prices, period=14):
    """Wilder-smoothed RSI of the whole series, or None if too short.

    A zero day-over-day change counts as neither gain nor loss, so a flat
    series has no losses and scores 100.
    """
    if len(prices) < period + 1:
        return None

    changes = [prices[i] - prices[i - 1] for i in range(1, len(prices))]

    avg_gain = sum(c for c in changes[:period] if c > 0) / period
    avg_loss = sum(-c for c in changes[:period] if c < 0) / period

    for change in changes[period:]:
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def rsi_signal(value, overbought=70, oversold=30):
    if value is None:
        return None
    if value >= overbought:
        return "Overbought"
    if value <= oversold:
        return "Oversold"
    return "Neutral"


# ── Range & returns ───────────────────────────────────────

def trailing_range(prices, window=252):
    """(high, low) of the last `window` closes; ~252 trading days is a year."""
    recent = prices[-window:]
    if not recent:
        return None, None
    return max(recent), min(recent)


def day_change(prices):
    """(change, change_pct) between the two most recent closes.

    Callers gate on history length first; with fewer than two closes both
    values are None.
    """
    if len(prices) < 2:
        return None, None
    current, previous = prices[-1], prices[-2]
    change = current - previous
    if previous <= 0:
        return change, None
    return change, (change / previous) * 100


def horizon_return(prices, years, trading_days_per_year=250, tolerance=0.95):
    """Percent return over `years`, annualized (CAGR) past one year.

    Needs at least `tolerance` of the horizon's samples. When the series
    is shorter than the full horizon the earliest close stands in for the
    reference price.
    """
    days_ago = years * trading_days_per_year
    if not prices or len(prices) < math.floor(days_ago * tolerance):
        return None

    current = prices[-1]
    past = prices[max(0, len(prices) - days_ago)]
    if past <= 0:
        return None

    if years > 1:
        if current < 0:
            return None
        return ((current / past) ** (1 / years) - 1) * 100
    return ((current - past) / past) * 100


def horizon_returns(prices, horizons, trading_days_per_year=250, tolerance=0.95):
    return {
        y: horizon_return(prices, y, trading_days_per_year, tolerance)
        for y in horizons
    }
