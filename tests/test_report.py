import io

import pytest
from rich.console import Console

from logstats.aggregator import calculate, track
from logstats.report import STALE_WARNING, format_row, show, summary_rows, summary_text
from logstats.store import AggregationStore, StatsNotCalculatedError


def _store():
    store = AggregationStore()
    for dyno, service in [("web.4", "10ms"), ("web.4", "29ms"), ("web.6", "35ms")]:
        track(store, {
            "method": "GET",
            "path": "/api/users/100/get_friends_score",
            "dyno": dyno,
            "connect": "0ms",
            "service": service,
        })
    return store


def _render(store):
    buffer = io.StringIO()
    show(store, Console(file=buffer, width=120, color_system=None))
    return buffer.getvalue()


def test_format_row_placeholders():
    assert format_row(0, {"mean": None, "median": None, "mode": None}, {"id": None, "count": None}) == [
        "0", "-", "-", "-", "-", "-",
    ]


def test_worker_hits_hidden_without_worker_id():
    row = format_row(1, {"mean": 5.0, "median": 5, "mode": [5]}, {"id": None, "count": 1})

    assert row[4:] == ["-", "-"]


def test_format_row_values():
    row = format_row(3, {"mean": 24.666666, "median": 29, "mode": [10, 29, 35]}, {"id": "web.4", "count": 2})

    assert row == ["3", "24.667", "29", "10,29,35", "web.4", "2"]


def test_zero_values_are_not_placeholders():
    row = format_row(1, {"mean": 0.0, "median": 0, "mode": [0]}, {"id": "web.1", "count": 1})

    assert row == ["1", "0.000", "0", "0", "web.1", "1"]


def test_summary_rows_before_calculate_raise():
    with pytest.raises(StatsNotCalculatedError):
        summary_rows(_store())


def test_show_before_calculate_raises():
    with pytest.raises(StatsNotCalculatedError):
        _render(_store())


def test_summary_rows_after_calculate():
    store = _store()
    calculate(store)

    (row,) = summary_rows(store)

    assert row["endpoint"] == "GET::/api/users/{user_id}/get_friends_score"
    assert row["hits"] == 3
    assert row["median"] == 29
    assert row["top_worker"] == "web.4"
    assert row["top_worker_hits"] == 2
    assert row["cells"] == ["3", "24.667", "29", "10,29,35", "web.4", "2"]


def test_show_prints_table_per_endpoint():
    store = _store()
    calculate(store)

    output = _render(store)

    assert "GET /api/users/{user_id}/get_friends_score" in output
    assert "24.667" in output
    assert STALE_WARNING not in output


def test_show_warns_when_stale():
    store = _store()
    calculate(store)
    track(store, {"method": "GET", "path": "/api/users/1", "dyno": "web.1", "connect": "1ms", "service": "1ms"})

    output = _render(store)

    assert "may be stale" in output
    # the late endpoint has no analysis until the next calculate()
    late = [row for row in summary_rows(store) if row["endpoint"] == "GET::/api/users/{user_id}"]
    assert late[0]["cells"] == ["1", "-", "-", "-", "-", "-"]


def test_summary_text_is_plain():
    store = _store()
    calculate(store)

    text = summary_text(store)

    assert "Res. Mean" in text
    assert "\x1b[" not in text
