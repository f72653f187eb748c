from __future__ import annotations

from typer.testing import CliRunner

from queueprobe import __version__
from queueprobe._json import loads
from queueprobe.cli import app

runner = CliRunner()

FAST = ["--host", "127.0.0.1", "--warmup-ms", "0", "--delay-ms", "0"]


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_run_against_stub_writes_summary(mock_service, tmp_path):
    out = tmp_path / "run" / "summary.json"
    result = runner.invoke(app, ["run", *FAST, "--port", str(mock_service), "--out", str(out)])
    assert result.exit_code == 0, result.output
    assert "4/4 tests passed" in result.output

    summary = loads(out.read_bytes())
    assert summary["passed"] == 4
    assert summary["total"] == 4
    assert summary["all_passed"] is True
    assert [o["expected_status"] for o in summary["outcomes"]] == [200, 202, 200, 422]


def test_failures_do_not_change_exit_code_by_default(closed_port):
    result = runner.invoke(app, ["run", *FAST, "--port", str(closed_port), "--timeout", "2"])
    assert result.exit_code == 0, result.output
    assert "0/4 tests passed" in result.output


def test_strict_exits_nonzero_on_failure(closed_port):
    result = runner.invoke(app, ["run", *FAST, "--port", str(closed_port), "--timeout", "2", "--strict"])
    assert result.exit_code == 1


def test_setup_error_exits_before_probing(tmp_path):
    bad = tmp_path / "bad.yml"
    bad.write_text("port: not-a-port\n")
    result = runner.invoke(app, ["run", "--config", str(bad)])
    assert result.exit_code == 2
    assert "Setup failed" in result.output
    assert "Testing" not in result.output
