"""Blocking execution of external commands."""

import subprocess
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

# Exit status a POSIX shell reports for a command it cannot find
COMMAND_NOT_FOUND = 127
# ... and for one it finds but cannot execute
COMMAND_NOT_EXECUTABLE = 126


def format_command(cmd: Sequence[str]) -> str:
    return " ".join(str(part) for part in cmd)


def run(cmd: Sequence[str], cwd: Path | None = None, env: Mapping[str, str] | None = None) -> int:
    """
    Run a command in the foreground and wait for it.

    Args:
        cmd: Command line
        cwd: Working directory (default: inherited)
        env: Full environment for the child (default: inherited)

    Returns:
        The command's exit status
    """
    print(f"$ {format_command(cmd)}", flush=True)
    try:
        result = subprocess.run([str(part) for part in cmd], cwd=cwd, env=env, check=False)
    except FileNotFoundError:
        print(f"✗ Command not found: {cmd[0]}", file=sys.stderr)
        return COMMAND_NOT_FOUND
    except PermissionError:
        print(f"✗ Command not executable: {cmd[0]}", file=sys.stderr)
        return COMMAND_NOT_EXECUTABLE
    return result.returncode
