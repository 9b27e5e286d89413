"""
Stock Dashboard -- Flask Backend
Computes moving averages, RSI, 52-week range and multi-year returns for
one symbol per request, and relays raw Yahoo Finance calls for browsers.
"""
import os
import json
import logging

import requests
from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from config import DashboardConfig
from errors import DashboardError
from market_data import USER_AGENT, make_source
from pipeline import load_dashboard, resolve_query

app = Flask(__name__)
CORS(app)

# ── Config ────────────────────────────────────────────────

CONFIG = DashboardConfig.from_env()
SOURCE = make_source(CONFIG)

RELAY_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}


def get_source():
    return app.config.get("MARKET_SOURCE") or SOURCE


def get_config():
    return app.config.get("DASHBOARD_CONFIG") or CONFIG


@app.errorhandler(DashboardError)
def handle_dashboard_error(e):
    return jsonify(e.to_dict()), e.status_code


# ── Routes ─────────────────────────────────────────────────

@app.route("/api/config")
def api_config():
    return jsonify(get_config().to_dict())


@app.route("/api/search")
def api_search():
    query = request.args.get("q", "").strip()
    if not query:
        return jsonify({"error": "Missing q parameter"}), 400
    found = get_source().search(query)
    if not found:
        return jsonify({"error": f"No stock found for '{query}'"}), 404
    symbol, name = found
    return jsonify({"symbol": symbol, "name": name})


@app.route("/api/resolve")
def api_resolve():
    ticker, name = resolve_query(request.args.get("q", ""), get_source())
    return jsonify({"ticker": ticker, "name": name})


@app.route("/api/stock/<path:query>")
def api_stock(query):
    """
    Full dashboard for one symbol.
    Query params:
      - name: display name to show instead of the resolved one
    Response: load context, stats panel, and display-window chart arrays.
    """
    try:
        result = load_dashboard(query, get_source(), get_config(), name=request.args.get("name"))
    except DashboardError as e:
        logging.warning(f"Load failed for {query}: {e.message}")
        raise
    return jsonify(result.to_dict())


@app.route("/api/proxy", methods=["GET", "POST", "OPTIONS"])
def api_proxy():
    """Opaque pass-through: fetch `url` server-side and re-emit with CORS headers."""
    target_url = request.args.get("url")
    if not target_url:
        return Response("Missing url parameter", status=400,
                        headers={"Access-Control-Allow-Origin": "*"})

    if request.method == "OPTIONS":
        return Response(status=200, headers={
            **RELAY_HEADERS,
            "Access-Control-Allow-Headers": "Content-Type",
            "Access-Control-Max-Age": "86400",
        })

    try:
        upstream = requests.get(
            target_url,
            headers={"User-Agent": USER_AGENT},
            timeout=get_config().request_timeout,
        )
    except requests.RequestException as e:
        logging.error(f"Relay error for {target_url}: {e}")
        return Response(json.dumps({"error": str(e)}), status=500, headers={
            "Access-Control-Allow-Origin": "*",
            "Content-Type": "application/json",
        })

    return Response(upstream.content, status=upstream.status_code, headers={
        **RELAY_HEADERS,
        "Content-Type": upstream.headers.get("Content-Type") or "application/json",
    })


# ── Entry point ────────────────────────────────────────────

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_DEBUG", "false").lower() == "true"
    app.run(host="0.0.0.0", port=port, debug=debug)
