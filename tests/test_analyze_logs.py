from typer.testing import CliRunner

from scripts.analyze_logs import app

SAMPLE = "\n".join([
    "2014-01-09T06:16:53+00:00 heroku[router]: at=info method=GET path=/api/users/1/get_friends_progress "
    "dyno=web.3 connect=2ms service=40ms status=200 bytes=52",
    "2014-01-09T06:16:54+00:00 heroku[router]: at=info method=GET path=/api/users/2/get_friends_progress "
    "dyno=web.3 connect=2ms service=20ms status=200 bytes=52",
    "2014-01-09T06:16:55+00:00 heroku[router]: at=info method=POST path=/api/users/3 "
    "dyno=web.1 connect=1ms service=7ms status=200 bytes=52",
    "2014-01-09T06:16:56+00:00 heroku[router]: at=info method=GET path=/api/online/users/4 "
    "dyno=web.1 connect=1ms service=7ms status=200 bytes=52",
]) + "\n"

runner = CliRunner()


def test_analyze_writes_summary(tmp_path):
    log_file = tmp_path / "sample.log"
    log_file.write_text(SAMPLE, encoding="utf-8")
    reports = tmp_path / "reports"

    result = runner.invoke(app, [str(log_file), "--reports-dir", str(reports)])

    assert result.exit_code == 0, result.output
    summary = (reports / "endpoint_summary.txt").read_text(encoding="utf-8")
    assert "GET /api/users/{user_id}/get_friends_progress" in summary
    assert "POST /api/users/{user_id}" in summary
    assert "32.000" in summary
    assert "/api/online" not in summary


def test_analyze_with_custom_tracked_requests(tmp_path):
    log_file = tmp_path / "sample.log"
    log_file.write_text(SAMPLE, encoding="utf-8")
    tracked = tmp_path / "tracked.txt"
    tracked.write_text("POST::/api/users/{user_id}\n", encoding="utf-8")
    reports = tmp_path / "reports"

    result = runner.invoke(app, [str(log_file), "--tracked", str(tracked), "--reports-dir", str(reports)])

    assert result.exit_code == 0, result.output
    summary = (reports / "endpoint_summary.txt").read_text(encoding="utf-8")
    assert "POST /api/users/{user_id}" in summary
    assert "get_friends_progress" not in summary


def test_missing_log_file_exits_non_zero(tmp_path):
    result = runner.invoke(app, [str(tmp_path / "missing.log")])

    assert result.exit_code == 1
