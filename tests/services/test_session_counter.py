"""Tests for the session counter."""

import subprocess
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from ai_session_tools.services.git_log import GitLog
from ai_session_tools.services.log_file import LogLockError, get_lock_path, log_lock
from ai_session_tools.services.session_counter import (
    IncrementResult,
    build_auto_entry,
    ensure_counter_header,
    format_utc_timestamp,
    increment_session,
    read_counter,
    set_counter,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def git_log():
    """GitLog stub with a fixed commit summary."""
    mock = MagicMock(spec=GitLog)
    mock.commit_summary.return_value = "abc123 Fix parser; def456 Add tests; 789abc Init"
    return mock


@pytest.fixture
def output():
    return []


class TestHeaderHelpers:
    """Tests for the counter header helpers."""

    def test_read_counter(self):
        assert read_counter("Session Counter: 12\n") == 12

    def test_read_counter_missing(self):
        assert read_counter("# Progress Log\n") is None

    def test_ensure_header_inserts_default(self):
        content, inserted = ensure_counter_header("# Progress Log\n")
        assert inserted is True
        assert content == "Session Counter: 0\n\n# Progress Log\n"

    def test_ensure_header_keeps_existing(self):
        content, inserted = ensure_counter_header("Session Counter: 3\n")
        assert inserted is False
        assert content == "Session Counter: 3\n"

    def test_set_counter_only_first(self):
        content = "Session Counter: 1\nquote: Session Counter: 9\n"
        assert set_counter(content, 2) == "Session Counter: 2\nquote: Session Counter: 9\n"


class TestBuildAutoEntry:
    """Tests for build_auto_entry."""

    def test_format_utc_timestamp(self):
        assert format_utc_timestamp(NOW) == "2024-03-01T12:00:00.000Z"

    def test_entry_fields(self):
        entry = build_auto_entry(NOW, "abc123 Fix")

        assert entry.startswith("\n\n# Log Entry (#1709294400000)\n")
        assert "- Date: 2024-03-01T12:00:00.000Z\n" in entry
        assert "- Goal: Automated session summary (review conversation for details)\n" in entry
        assert "- Actions: Incremented counter; Recent commits: abc123 Fix\n" in entry
        assert "- Status: In Progress\n" in entry
        assert entry.endswith("- Next Steps: Continue session tasks\n")


class TestIncrementSession:
    """Tests for increment_session."""

    def test_increments(self, make_log, git_log, output):
        path = make_log("Session Counter: 0\n\n## Entry #1\n")

        result = increment_session(path, now=NOW, git_log=git_log, echo=output.append)

        assert result == IncrementResult(
            counter=1, previous=0, entry_added=False, header_inserted=False
        )
        assert path.read_text(encoding="utf-8") == "Session Counter: 1\n\n## Entry #1\n"
        assert output == ["Counter incremented to 1"]
        git_log.commit_summary.assert_not_called()

    def test_five_runs_append_entry_and_reset(self, make_log, git_log, output, tmp_path):
        path = make_log("Session Counter: 0\n\n## Entry #1 - Start\nDate: 2024-03-01\n")
        observed = []

        for _ in range(5):
            result = increment_session(path, now=NOW, git_log=git_log, echo=output.append)
            observed.append(read_counter(path.read_text(encoding="utf-8")))

        assert observed == [1, 2, 3, 4, 0]
        assert result.counter == 0
        assert result.previous == 4
        assert result.entry_added is True

        content = path.read_text(encoding="utf-8")
        assert content.startswith("Session Counter: 0\n\n## Entry #1 - Start\n")
        assert content.endswith(result.entry)
        assert "- Date: 2024-03-01T12:00:00.000Z" in content
        assert "Recent commits: abc123 Fix parser; def456 Add tests; 789abc Init" in content
        assert content.count("# Log Entry (#") == 1

        assert output[:4] == [f"Counter incremented to {n}" for n in range(1, 5)]
        assert output[4] == "Auto-generated log entry added! Resetting counter."
        git_log.commit_summary.assert_called_once_with(str(tmp_path), 3)

    def test_sixth_run_starts_over(self, make_log, git_log, output):
        path = make_log("Session Counter: 4\n")
        increment_session(path, now=NOW, git_log=git_log, echo=output.append)

        result = increment_session(path, now=NOW, git_log=git_log, echo=output.append)

        assert result.counter == 1
        assert path.read_text(encoding="utf-8").count("# Log Entry (#") == 1

    def test_missing_header_inserted(self, make_log, git_log, output):
        path = make_log("## Entry #1 - Notes\n")

        result = increment_session(path, now=NOW, git_log=git_log, echo=output.append)

        assert result.header_inserted is True
        assert result.counter == 1
        assert path.read_text(encoding="utf-8") == "Session Counter: 1\n\n## Entry #1 - Notes\n"

    def test_header_not_at_top(self, make_log, git_log, output):
        path = make_log("# Progress\nSession Counter: 2\n")

        increment_session(path, now=NOW, git_log=git_log, echo=output.append)

        assert path.read_text(encoding="utf-8") == "# Progress\nSession Counter: 3\n"

    def test_counter_above_reset_count(self, make_log, git_log, output):
        path = make_log("Session Counter: 9\n")

        result = increment_session(path, now=NOW, git_log=git_log, echo=output.append)

        assert result.entry_added is True
        assert read_counter(path.read_text(encoding="utf-8")) == 0

    def test_custom_reset_and_commit_count(self, make_log, git_log, output, tmp_path):
        path = make_log("Session Counter: 1\n")

        result = increment_session(
            path,
            project_root=tmp_path / "repo",
            reset_count=2,
            commit_count=5,
            now=NOW,
            git_log=git_log,
            echo=output.append,
        )

        assert result.entry_added is True
        git_log.commit_summary.assert_called_once_with(str(tmp_path / "repo"), 5)

    def test_git_failure_uses_placeholder(self, make_log, output):
        path = make_log("Session Counter: 4\n")

        with patch("ai_session_tools.services.git_log.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=[], returncode=128, stdout="", stderr="fatal: not a git repository"
            )
            result = increment_session(path, now=NOW, echo=output.append)

        assert result.entry_added is True
        assert "Recent commits: [No recent commits]" in path.read_text(encoding="utf-8")

    def test_git_missing_uses_placeholder(self, make_log, output):
        path = make_log("Session Counter: 4\n")

        with patch(
            "ai_session_tools.services.git_log.subprocess.run",
            side_effect=FileNotFoundError("git"),
        ):
            increment_session(path, now=NOW, echo=output.append)

        assert "Recent commits: [No recent commits]" in path.read_text(encoding="utf-8")

    def test_missing_file_raises(self, tmp_path, git_log, output):
        with pytest.raises(FileNotFoundError):
            increment_session(tmp_path / "missing.md", git_log=git_log, echo=output.append)
        assert output == []

    def test_missing_file_raises_without_lock(self, tmp_path, git_log, output):
        with pytest.raises(FileNotFoundError):
            increment_session(
                tmp_path / "missing.md", git_log=git_log, use_lock=False, echo=output.append
            )
        assert not get_lock_path(tmp_path / "missing.md").exists()

    def test_lock_held_raises(self, make_log, git_log, output):
        path = make_log("Session Counter: 0\n")

        with log_lock(path):
            with pytest.raises(LogLockError):
                increment_session(path, git_log=git_log, echo=output.append)

        assert path.read_text(encoding="utf-8") == "Session Counter: 0\n"

    def test_default_now_is_wall_clock(self, make_log, git_log, output):
        path = make_log("Session Counter: 4\n")
        before = datetime.now(timezone.utc)

        result = increment_session(path, git_log=git_log, echo=output.append)

        assert f"- Date: {before.year}-" in result.entry
