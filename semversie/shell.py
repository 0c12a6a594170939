"""Shell, git and GitHub CLI utilities.

Provides simple wrappers around subprocess calls for git and gh, plus
output helpers that double as GitHub Actions workflow commands.
"""

from __future__ import annotations

import os
import subprocess
import sys


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "log", "--no-merges").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., tag lookup).

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def gh(*args: str, check: bool = True, token: str | None = None) -> str:
    """Run a GitHub CLI command and return stdout.

    Args:
        *args: Arguments to pass to gh (e.g., "release", "view").
        check: If True (default), raise on non-zero exit.
        token: Exported as GH_TOKEN for this call when given.

    Returns:
        Stripped stdout from the gh command.
    """
    env = None
    if token:
        env = {**os.environ, "GH_TOKEN": token}
    result = subprocess.run(
        ["gh", *args], capture_output=True, text=True, check=check, env=env
    )
    return result.stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of the run in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warning(msg: str) -> None:
    """Print a warning annotation (shown in the Actions run summary)."""
    print(f"::warning::{msg}")


def error(msg: str) -> None:
    """Print an error annotation without stopping the run."""
    print(f"::error::{msg}")


def fatal(msg: str) -> None:
    """Print an error annotation and exit with code 1.

    Use for unrecoverable errors that should halt the run.
    """
    print(f"::error::{msg}", file=sys.stderr)
    sys.exit(1)
