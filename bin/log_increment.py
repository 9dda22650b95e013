#!/usr/bin/env python3
"""Increment the session counter in the progress log.

Run at session start. The progress log lives in this tool directory's
parent: ``<repo>/PROJECT-PROGRESS-LOG.md``.
"""

import sys
from pathlib import Path

# Add src to path so we can import without installing
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root / "src"))

from ai_session_tools.cli.log_increment import increment


if __name__ == "__main__":
    increment(project_root)
