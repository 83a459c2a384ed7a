#!/usr/bin/env python3
"""Start the Finance Tracker in Streamlit.

Usage:
    python run_app.py [--server.port 8502 ...]

Extra arguments are passed through to ``streamlit run``.  Streamlit is run
from inside ``finance_tracker/`` so it discovers the ``pages/`` directory.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

PROJECT_ROOT = Path(__file__).parent.resolve()
APP_DIR = PROJECT_ROOT / "finance_tracker"
ENTRY_SCRIPT = "Home.py"


def build_command(extra_args: Sequence[str] = ()) -> List[str]:
    return [sys.executable, "-m", "streamlit", "run", ENTRY_SCRIPT, *extra_args]


def build_env(base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Environment for the Streamlit process with the project root importable."""
    env = dict(os.environ if base is None else base)
    paths = [str(PROJECT_ROOT)]
    if env.get("PYTHONPATH"):
        paths.append(env["PYTHONPATH"])
    env["PYTHONPATH"] = os.pathsep.join(paths)
    return env


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    completed = subprocess.run(build_command(args), cwd=APP_DIR, env=build_env())
    return completed.returncode


if __name__ == "__main__":
    sys.exit(main())
