"""Recent commit lookup for auto-generated progress log entries."""

import logging
import os
import subprocess

from .path_constants import NO_COMMITS_PLACEHOLDER

logger = logging.getLogger(__name__)


def summarize_commits(commits: list[str] | None) -> str:
    """
    Collapse one-line commits into a single summary line.

    Args:
        commits: Lines from ``git log --oneline``, or None on failure

    Returns:
        Commits joined with "; ", or the placeholder when there are none
    """
    if not commits:
        return NO_COMMITS_PLACEHOLDER
    return "; ".join(commits)


class GitLog:
    """Query a project's recent commits with ``git log --oneline``."""

    def __init__(self, timeout: float = 5) -> None:
        self._timeout = timeout

    def recent_commits(self, project_path: str, count: int = 3) -> list[str] | None:
        """
        Get the most recent commits in one-line form.

        Args:
            project_path: Path to the project directory
            count: Number of commits to return

        Returns:
            Commit lines (possibly empty), or None if git failed
        """
        project_path = os.path.normpath(os.path.expanduser(str(project_path)))

        try:
            result = subprocess.run(
                ["git", "log", "-n", str(count), "--oneline"],
                cwd=project_path,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
            if result.returncode == 0:
                return [line.strip() for line in result.stdout.splitlines() if line.strip()]
            logger.debug(f"git log failed in {project_path}: {result.stderr.strip()}")
        except subprocess.TimeoutExpired:
            logger.warning(f"Git log timeout for: {project_path}")
        except FileNotFoundError:
            logger.warning("Git command not found")
        except OSError as e:
            logger.debug(f"Could not get git log: {e}")

        return None

    def commit_summary(self, project_path: str, count: int = 3) -> str:
        """Recent commits as one summary line, with a placeholder on failure."""
        return summarize_commits(self.recent_commits(project_path, count))
