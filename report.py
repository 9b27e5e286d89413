#!/usr/bin/env python3
"""
report.py: print the dashboard stat panel for one symbol.

Usage:
  python report.py AAPL
  python report.py "apple inc"
"""
import sys
import logging

from config import DashboardConfig
from errors import DashboardError
from market_data import make_source
from pipeline import load_dashboard


def fmt_money(value):
    if value is None:
        return "--"
    return f"${value:,.2f}"


def fmt_change(value):
    if value is None:
        return "--"
    sign = "+" if value >= 0 else "-"
    return f"{sign}{fmt_money(abs(value))}"


def fmt_pct(value, digits=1, signed=True):
    if value is None:
        return "--"
    sign = "+" if signed and value >= 0 else ""
    return f"{sign}{value:.{digits}f}%"


def fmt_num(value, digits):
    return "--" if value is None else f"{value:.{digits}f}"


def render(result):
    s = result.stats
    lines = [
        f"{'='*60}",
        f"  {result.context.label}",
        f"{'='*60}",
        f"Price:          {fmt_money(s.current_price)}  "
        f"{fmt_change(s.price_change)} ({fmt_pct(s.price_change_pct, 2)})",
    ]
    for window, value in s.current_mas.items():
        label = f"{window}-Day MA:"
        lines.append(f"{label:<16}{fmt_money(value)}")
    lines += [
        f"52W High:       {fmt_money(s.high_52w)}",
        f"52W Low:        {fmt_money(s.low_52w)}",
        f"RSI:            {fmt_num(s.rsi, 1)} {s.rsi_signal or ''}".rstrip(),
    ]
    for years, value in s.returns.items():
        label = f"{years}Y Return:" if years == 1 else f"{years}Y CAGR:"
        lines.append(f"{label:<16}{fmt_pct(value)}")
    lines += [
        f"P/E:            {fmt_num(s.pe_ratio, 1)}",
        f"PEG:            {fmt_num(s.peg_ratio, 2)}",
        f"Profit Margin:  {fmt_pct(s.profit_margin, signed=False)}",
        f"Data points:    {result.data_points} (chart shows {len(result.chart.prices)})",
        f"As of:          {result.latest.date} (volume {result.latest.volume:,})",
    ]
    return "\n".join(lines)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(__doc__)
        return 1

    config = DashboardConfig.from_env()
    try:
        result = load_dashboard(" ".join(argv), make_source(config), config)
    except DashboardError as e:
        print(f"ERROR: {e.message}")
        return 1

    print(render(result))
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
