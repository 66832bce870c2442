from click.testing import CliRunner

from bisect_memo.cli import cli


def test_cli_help():
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "demo" in result.output
    assert "show-settings" in result.output


def test_demo_serves_cached_result_without_expiry(monkeypatch):
    monkeypatch.delenv("BISECT_MEMO_EXPIRY_MS", raising=False)

    result = CliRunner().invoke(
        cli, ["demo", "--calls", "3", "--interval", "1", "--latency", "1"]
    )
    assert result.exit_code == 0, result.output
    assert result.output.count("-> 2") == 3
    assert "producer invocations: 1" in result.output


def test_demo_reinvokes_after_expiry():
    result = CliRunner().invoke(
        cli,
        [
            "demo",
            "--calls",
            "2",
            "--interval",
            "150",
            "--expiry",
            "50",
            "--latency",
            "1",
            "--value",
            "5",
            "--increment",
            "10",
        ],
    )
    assert result.exit_code == 0, result.output
    assert result.output.count("-> 15") == 2
    assert "producer invocations: 2" in result.output


def test_show_settings(monkeypatch):
    monkeypatch.setenv("BISECT_MEMO_EXPIRY_MS", "1500")

    result = CliRunner().invoke(cli, ["show-settings"])
    assert result.exit_code == 0
    assert "expiry_ms: 1500" in result.output
