"""
Operator CLI smoke tests (unconfigured env -> in-memory store).
"""
from __future__ import annotations

from click.testing import CliRunner

from backend.tools.reviews_cli import cli


def test_list_on_empty_store():
    result = CliRunner().invoke(cli, ["list"])

    assert result.exit_code == 0, result.output
    assert "0 review(s)" in result.output


def test_check_course_unknown_title_exits_nonzero():
    result = CliRunner().invoke(cli, ["check-course", "Intro to X"])

    assert result.exit_code == 1
    assert "Course not found" in result.output


def test_check_course_blank_title_is_bad_parameter():
    result = CliRunner().invoke(cli, ["check-course", "  "])

    assert result.exit_code == 2
    assert "title_required" in result.output


def test_watch_runs_for_duration_and_stops():
    result = CliRunner().invoke(cli, ["watch", "--refresh-seconds", "0.05", "--duration", "0.1"])

    assert result.exit_code == 0, result.output
    assert "0 review(s)" in result.output


def test_watch_rejects_non_positive_interval():
    result = CliRunner().invoke(cli, ["watch", "--refresh-seconds", "0"])

    assert result.exit_code == 2


def test_serve_runs_the_dashboard_app_with_uvicorn(monkeypatch):
    from backend.tools import reviews_cli

    calls = []
    monkeypatch.setattr(reviews_cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    result = CliRunner().invoke(cli, ["serve", "--port", "9001"])

    assert result.exit_code == 0, result.output
    assert calls == [("backend.web.main:app", {"host": "127.0.0.1", "port": 9001, "reload": False, "proxy_headers": True})]
