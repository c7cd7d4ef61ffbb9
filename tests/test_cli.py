"""Smoke tests for the CLI."""

from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import VALID_KEY, FakeGateway
from typer.testing import CliRunner
from worklog import __version__
from worklog.cli import EMPTY_WORKLOG_MESSAGE, app
from worklog.core import Worklog
from worklog.errors import NetworkError, RateLimited
from worklog.vault import MemoryCredentialVault

DOCUMENT = (
    "# Work Log\n\n"
    "## January 2024\n- Launched search (Jan 10, 2024)\n\n"
    "## February 2024\n- Migrated billing (Feb 3, 2024)\n"
)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner(env={"NO_COLOR": "1", "FORCE_COLOR": None})


@pytest.fixture
def open_worklog(worklog):
    """Route every command to the in-memory test worklog."""
    with patch("worklog.cli._open_worklog", return_value=worklog):
        yield worklog


class TestCLI:
    """Tests for the CLI entry point."""

    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("add", "show", "undo", "report", "key"):
            assert command in result.output

    def test_main_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"worklog {__version__}" in result.output


class TestAdd:
    def test_add_updates_worklog(self, runner, open_worklog) -> None:
        open_worklog.gateway.replies.append(DOCUMENT)
        result = runner.invoke(app, ["add", "Launched search", "Migrated billing"])
        assert result.exit_code == 0
        assert "Worklog updated." in result.output
        assert open_worklog.read() == DOCUMENT
        assert "- Launched search\n- Migrated billing" in (
            open_worklog.gateway.prompts[0].user
        )

    def test_add_requires_entries(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["add"])
        assert result.exit_code != 0

    def test_add_too_many(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["add", "a", "b", "c", "d"])
        assert result.exit_code == 1
        assert "Too many entries" in result.output
        assert open_worklog.gateway.calls == 0

    def test_add_blank_entries(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["add", "  ", ""])
        assert result.exit_code == 1
        assert "at least one work win" in result.output

    def test_add_missing_key(self, runner, store) -> None:
        worklog = Worklog(store, MemoryCredentialVault(), FakeGateway([DOCUMENT]))
        with patch("worklog.cli._open_worklog", return_value=worklog):
            result = runner.invoke(app, ["add", "Launched search"])
        assert result.exit_code == 1
        assert "worklog key set" in result.output

    def test_add_retryable_error_shows_hint(self, runner, open_worklog) -> None:
        open_worklog.gateway.error = NetworkError("Connection error: refused")
        result = runner.invoke(app, ["add", "Launched search"])
        assert result.exit_code == 1
        assert "Connection error" in result.output
        assert "Try again shortly" in result.output
        assert open_worklog.read() == ""

    def test_add_rate_limited_shows_wait(self, runner, open_worklog) -> None:
        open_worklog.gateway.error = RateLimited("Rate limit exceeded", retry_after=20)
        result = runner.invoke(app, ["add", "Launched search"])
        assert result.exit_code == 1
        assert "Try again in 20s." in result.output


class TestShowAndUndo:
    def test_show_empty(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["show"])
        assert result.exit_code == 0
        assert EMPTY_WORKLOG_MESSAGE in result.output

    def test_show_raw(self, runner, open_worklog) -> None:
        open_worklog.store.commit(DOCUMENT)
        result = runner.invoke(app, ["show", "--raw"])
        assert result.exit_code == 0
        assert DOCUMENT.strip() in result.output

    def test_show_rendered(self, runner, open_worklog) -> None:
        open_worklog.store.commit(DOCUMENT)
        result = runner.invoke(app, ["show"])
        assert result.exit_code == 0
        assert "Launched search" in result.output

    def test_undo(self, runner, open_worklog) -> None:
        open_worklog.store.commit("# Work Log\n")
        open_worklog.store.commit(DOCUMENT)
        result = runner.invoke(app, ["undo"])
        assert result.exit_code == 0
        assert "Restored the previous version." in result.output
        assert open_worklog.read() == "# Work Log\n"

    def test_undo_without_backup(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["undo"])
        assert result.exit_code == 1
        assert "No previous version to restore." in result.output


class TestReport:
    def test_report_prints(self, runner, open_worklog) -> None:
        open_worklog.store.commit(DOCUMENT)
        open_worklog.gateway.replies.append("# January\n\nSearch launched.")
        result = runner.invoke(
            app, ["report", "--start", "2024-01-01", "--end", "2024-01-31", "--raw"]
        )
        assert result.exit_code == 0
        assert "Search launched." in result.output
        assert "Migrated billing" not in open_worklog.gateway.prompts[0].user

    def test_report_to_directory(self, runner, open_worklog, tmp_path: Path) -> None:
        open_worklog.store.commit(DOCUMENT)
        open_worklog.gateway.replies.append("# January")
        out_dir = tmp_path / "reports"
        out_dir.mkdir()
        result = runner.invoke(
            app,
            [
                "report",
                "--start", "2024-01-01",
                "--end", "2024-01-31",
                "--style", "detailed",
                "--output", str(out_dir),
            ],
        )
        assert result.exit_code == 0
        written = out_dir / "worklog-report-2024-01-01-to-2024-01-31.md"
        assert written.read_text(encoding="utf-8") == "# January"
        assert "Report written to" in result.output

    def test_report_to_file(self, runner, open_worklog, tmp_path: Path) -> None:
        open_worklog.store.commit(DOCUMENT)
        open_worklog.gateway.replies.append("# February")
        target = tmp_path / "out" / "feb.md"
        result = runner.invoke(
            app,
            ["report", "--start", "2024-02-01", "--end", "2024-02-29", "-o", str(target)],
        )
        assert result.exit_code == 0
        assert target.read_text(encoding="utf-8") == "# February"

    def test_report_unwritable_output(self, runner, open_worklog, tmp_path: Path) -> None:
        open_worklog.store.commit(DOCUMENT)
        open_worklog.gateway.replies.append("# January")
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        result = runner.invoke(
            app,
            [
                "report",
                "--start", "2024-01-01",
                "--end", "2024-01-31",
                "-o", str(blocker / "report.md"),
            ],
        )
        assert result.exit_code == 1
        assert "Failed to write report" in result.output
        assert not isinstance(result.exception, OSError)

    def test_report_bad_style(self, runner, open_worklog) -> None:
        result = runner.invoke(
            app, ["report", "--start", "2024-01-01", "--end", "2024-01-31", "-s", "haiku"]
        )
        assert result.exit_code == 1
        assert "Unknown report style" in result.output

    def test_report_bad_date(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["report", "--start", "01/01/2024"])
        assert result.exit_code == 1
        assert "YYYY-MM-DD" in result.output

    def test_report_inverted_window(self, runner, open_worklog) -> None:
        open_worklog.store.commit(DOCUMENT)
        result = runner.invoke(
            app, ["report", "--start", "2024-02-01", "--end", "2024-01-01"]
        )
        assert result.exit_code == 1
        assert open_worklog.gateway.calls == 0

    def test_report_no_entries(self, runner, open_worklog) -> None:
        open_worklog.store.commit(DOCUMENT)
        result = runner.invoke(
            app, ["report", "--start", "2023-01-01", "--end", "2023-01-31"]
        )
        assert result.exit_code == 1
        assert "No entries found in the specified date range." in result.output


class TestKeyCommands:
    def test_status_configured(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["key", "status"])
        assert result.exit_code == 0
        assert "API key configured." in result.output

    def test_set_and_delete_with_data_dir(self, runner, tmp_path: Path) -> None:
        data_dir = str(tmp_path / "data")

        result = runner.invoke(app, ["--data-dir", data_dir, "key", "status"])
        assert "No API key configured." in result.output

        result = runner.invoke(
            app, ["--data-dir", data_dir, "key", "set", "--api-key", VALID_KEY]
        )
        assert result.exit_code == 0
        assert "API key saved." in result.output
        assert (tmp_path / "data" / "credential").read_text() == VALID_KEY

        result = runner.invoke(app, ["--data-dir", data_dir, "key", "delete", "--yes"])
        assert result.exit_code == 0
        assert not (tmp_path / "data" / "credential").exists()

    def test_set_prompts_for_key(self, runner, open_worklog) -> None:
        open_worklog.vault.delete()
        result = runner.invoke(app, ["key", "set"], input=f"{VALID_KEY}\n")
        assert result.exit_code == 0
        assert open_worklog.vault.get() == VALID_KEY

    def test_set_rejects_bad_format(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["key", "set", "--api-key", "not-a-key"])
        assert result.exit_code == 1
        assert open_worklog.vault.get() == VALID_KEY

    def test_delete_declined(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["key", "delete"], input="n\n")
        assert result.exit_code == 0
        assert open_worklog.vault.status() is True

    def test_delete_confirmed(self, runner, open_worklog) -> None:
        result = runner.invoke(app, ["key", "delete"], input="y\n")
        assert result.exit_code == 0
        assert "API key deleted." in result.output
        assert open_worklog.vault.status() is False
