"""
Unit tests for series alignment and display windowing.
"""
import pytest

import indicators
from errors import NoDataError, UpstreamError
from timeseries import (
    PricePoint, align_arrays, align_series, epoch_to_date, window_for_display,
)
from conftest import DAY, START_TS, make_payload


class TestEpochToDate:
    def test_utc_calendar_day(self):
        assert epoch_to_date(START_TS) == "2020-01-02"

    def test_time_of_day_dropped(self):
        # 2020-01-02 23:59:59 UTC
        assert epoch_to_date(START_TS + DAY - 1) == "2020-01-02"
        # 14:30 UTC market open still maps to the same day
        assert epoch_to_date(START_TS + 14 * 3600 + 1800) == "2020-01-02"


class TestAlignArrays:
    def test_no_missing_keeps_everything(self):
        closes = [10.0, 11.0, 12.0, 13.0]
        series = align_arrays([START_TS + i * DAY for i in range(4)], closes, [1, 2, 3, 4])
        assert len(series) == 4
        assert series.prices == closes
        assert series.volumes == [1, 2, 3, 4]
        assert series.dates == ["2020-01-02", "2020-01-03", "2020-01-04", "2020-01-05"]

    def test_every_nth_missing_is_dropped(self):
        n = 3
        closes = [None if i % n == 0 else float(i) for i in range(30)]
        missing = sum(1 for c in closes if c is None)
        series = align_arrays([START_TS + i * DAY for i in range(30)], closes)
        assert len(series) == 30 - missing
        assert series.prices == [c for c in closes if c is not None]
        assert series.dates == sorted(series.dates)

    def test_missing_volume_defaults_to_zero(self):
        series = align_arrays([START_TS, START_TS + DAY], [1.0, 2.0], [None, 500])
        assert series.volumes == [0, 500]

    def test_volume_array_absent(self):
        series = align_arrays([START_TS, START_TS + DAY], [1.0, 2.0])
        assert series.volumes == [0, 0]

    def test_dropped_day_drops_its_volume_too(self):
        series = align_arrays(
            [START_TS, START_TS + DAY, START_TS + 2 * DAY], [1.0, None, 3.0], [10, 20, 30]
        )
        assert series.dates == ["2020-01-02", "2020-01-04"]
        assert series.volumes == [10, 30]

    def test_latest(self):
        series = align_arrays([START_TS, START_TS + DAY, START_TS + 2 * DAY], [40.0, 42.5, None], [3, 7, 9])
        assert series.latest() == PricePoint("2020-01-03", 42.5, 7)
        assert series.latest().to_dict() == {"date": "2020-01-03", "close": 42.5, "volume": 7}

    def test_latest_empty(self):
        assert align_arrays([], []).latest() is None


class TestAlignSeries:
    def test_reads_chart_payload(self):
        series = align_series(make_payload([1.0, None, 3.0], [5, 6, 7]))
        assert series.prices == [1.0, 3.0]
        assert series.volumes == [5, 7]

    @pytest.mark.parametrize("payload", [
        {},
        {"chart": {"result": []}},
        {"chart": {"result": None}},
    ])
    def test_missing_result_is_no_data(self, payload):
        with pytest.raises(NoDataError):
            align_series(payload)

    @pytest.mark.parametrize("payload", [
        {"chart": {"result": [{"timestamp": [START_TS], "indicators": None}]}},
        {"chart": {"result": [{"timestamp": [START_TS], "indicators": {"quote": [None]}}]}},
        {"chart": {"result": [{"timestamp": [START_TS], "indicators": {"quote": [{"close": None}]}}]}},
    ])
    def test_timestamps_without_closes_is_no_data(self, payload):
        with pytest.raises(NoDataError):
            align_series(payload)

    @pytest.mark.parametrize("payload", [
        {"chart": {"result": [None]}},
        {"chart": {"result": ["oops"]}},
        {"chart": {"result": {"timestamp": [START_TS]}}},
        {"chart": "oops"},
        ["not", "an", "object"],
        {"chart": {"result": [{"timestamp": [START_TS], "indicators": {"quote": "oops"}}]}},
        {"chart": {"result": [{"timestamp": [START_TS], "indicators": {"quote": [{"close": ["n/a"]}]}}]}},
    ])
    def test_malformed_payload_is_upstream_error(self, payload):
        with pytest.raises(UpstreamError) as exc:
            align_series(payload)
        assert exc.value.message == "Failed to fetch data."
        assert exc.value.status_code == 502

    def test_empty_timestamps(self):
        payload = {"chart": {"result": [{"indicators": {"quote": [{}]}}]}}
        assert len(align_series(payload)) == 0


class TestWindowForDisplay:
    def test_trailing_n_of_every_array(self):
        dates = [f"d{i}" for i in range(10)]
        prices = [float(i) for i in range(10)]
        mas = {3: indicators.moving_average(prices, 3)}
        chart = window_for_display(dates, prices, mas, 4)
        assert chart.dates == dates[-4:]
        assert chart.prices == prices[-4:]
        assert chart.moving_averages[3] == mas[3][-4:]

    def test_shorter_than_window_keeps_all(self):
        chart = window_for_display(["a", "b"], [1.0, 2.0], {5: [None, None]}, 500)
        assert chart.prices == [1.0, 2.0]
        assert chart.moving_averages[5] == [None, None]

    def test_zero_window_is_empty(self):
        chart = window_for_display(["a"], [1.0], {1: [1.0]}, 0)
        assert chart.dates == []
        assert chart.moving_averages == {1: []}

    def test_windowing_after_compute_keeps_indicator_values(self):
        prices = [100 + (i * 7 % 13) for i in range(60)]
        dates = [str(i) for i in range(60)]
        window, days = 10, 20
        full = indicators.moving_average(prices, window)
        chart = window_for_display(dates, prices, {window: full}, days)
        truncated = indicators.moving_average(prices[-days:], window)

        assert chart.moving_averages[window] == full[-days:]
        # Where the window fits entirely inside the truncated range the two agree;
        # near the edge the truncated computation has no history and is None.
        for i in range(days):
            if i >= window - 1:
                assert chart.moving_averages[window][i] == pytest.approx(truncated[i])
            else:
                assert truncated[i] is None
                assert chart.moving_averages[window][i] is not None

    def test_to_dict_stringifies_windows(self):
        chart = window_for_display(["a"], [1.0], {200: [None]}, 5)
        assert chart.to_dict() == {
            "dates": ["a"], "prices": [1.0], "moving_averages": {"200": [None]},
        }
