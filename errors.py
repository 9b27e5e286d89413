"""
Failures that end a dashboard load.

Each carries the user-facing message and the HTTP status the API answers
with. Indicator edge cases never raise; they resolve to None or 100.
"""


class DashboardError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.message}


class InvalidQueryError(DashboardError):
    status_code = 400


class TickerNotFoundError(DashboardError):
    status_code = 404

    def __init__(self, ticker=None):
        super().__init__("Invalid ticker symbol. Please check and try again.")
        self.ticker = ticker


class NoDataError(DashboardError):
    status_code = 404

    def __init__(self, message="No data available for this ticker."):
        super().__init__(message)


class InsufficientHistoryError(DashboardError):
    status_code = 422

    def __init__(self, required, available):
        super().__init__(
            f"Not enough data to calculate {required}-day moving average. "
            f"Need at least {required} days of data."
        )
        self.required = required
        self.available = available


class UpstreamError(DashboardError):
    """Non-404 provider failure, or a payload that carries its own error."""
    status_code = 502

    def __init__(self, status=None, description=None):
        if description:
            message = description
        elif status is not None:
            message = f"Server error ({status}). Please try again later."
        else:
            message = "Failed to fetch data."
        super().__init__(message)
        self.status = status


class NetworkError(DashboardError):
    status_code = 503

    def __init__(self, message="Network error. Please check your connection and try again."):
        super().__init__(message)


class ConfigError(ValueError):
    pass
