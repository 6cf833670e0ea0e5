"""External command runner.

Contains:
- CommandResult: Captured outcome of one external command
- run_command: Run a command synchronously and capture its output
- run_git: Run a git command in a directory and return trimmed stdout
- exec_steps: Run several commands in order in the same directory
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from reposeed.env import get_env
from reposeed.exceptions import ExternalToolError

# Round-trips arbitrary bytes in file content through str
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


@dataclass
class CommandResult:
    """Captured outcome of an external command."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    def command_line(self) -> str:
        return " ".join(self.args)


def run_command(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    input: Optional[str] = None,
) -> CommandResult:
    """Run an external command and capture its output.

    Args:
        args: Program followed by its arguments.
        cwd: Working directory for the command.
        input: Optional text fed to stdin.

    Returns:
        The captured result.

    Raises:
        ExternalToolError: If the command exits non-zero or cannot be started.
    """
    args = [str(a) for a in args]
    # Bytes in and out: text mode would translate \r\n and lone \r to \n
    stdin = input.encode(ENCODING, ENCODING_ERRORS) if input is not None else None
    try:
        completed = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            input=stdin,
            capture_output=True,
            env=get_env(),
        )
    except FileNotFoundError:
        raise ExternalToolError(f"{args[0]} is not installed or not in PATH.")

    result = CommandResult(
        args=args,
        returncode=completed.returncode,
        stdout=(completed.stdout or b"").decode(ENCODING, ENCODING_ERRORS),
        stderr=(completed.stderr or b"").decode(ENCODING, ENCODING_ERRORS),
    )
    if result.returncode != 0:
        raise ExternalToolError(
            f"Command failed ({result.returncode}): {result.command_line()}\n"
            f"{result.stderr.strip()}",
            result=result,
        )
    return result


def run_git(cwd: Path, args: list[str], input: Optional[str] = None) -> str:
    """Run a git command in a directory and return its stripped stdout."""
    return run_command(["git"] + args, cwd=cwd, input=input).stdout.strip()


def exec_steps(cwd: Path, steps: list[list[str]]) -> None:
    """Run each command in order, stopping at the first failure."""
    for step in steps:
        run_command(step, cwd=cwd)
