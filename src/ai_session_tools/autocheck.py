"""Run the progress log check as a side effect of import.

Add ``import ai_session_tools.autocheck`` at the top of any script that is
run often during development. The check uses the current working
directory as the project root and never raises.
"""

import logging
from pathlib import Path

from .app import create_context, run_log_check
from .services.log_checker import CheckResult

logger = logging.getLogger(__name__)


def run_autocheck(project_root: str | Path | None = None) -> CheckResult | None:
    """Check the progress log under project_root (default: cwd)."""
    try:
        context = create_context(project_root or Path.cwd(), configure_logging=False)
    except Exception as e:
        logger.debug(f"Progress log autocheck skipped: {e}")
        return None
    return run_log_check(context)


result = run_autocheck()
