"""External command execution for probes.

Every probe spawns its commands through a :data:`CommandRunner`, a
callable taking an argument list and a timeout and returning a
:class:`CommandResult`.  :func:`run_command` is the real implementation;
tests pass a stub instead so that no subprocess is spawned.

The runner never raises for the command's own failures.  A missing
executable is reported as exit code 127 and a timeout as exit code 124,
mirroring the conventions of the shell and ``timeout(1)``.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..config import DEFAULT_COMMAND_TIMEOUT

EXIT_TIMEOUT = 124
EXIT_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command.

    Parameters
    ----------
    args : tuple of str
        The command that was run.
    returncode : int
        Process exit status (124 on timeout, 127 if not executable).
    stdout, stderr : str
        Captured output as text.
    """

    args: tuple
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def timed_out(self) -> bool:
        return self.returncode == EXIT_TIMEOUT

    def tail(self, lines: int = 5) -> str:
        """Return the last few lines of combined output for diagnostics."""
        text = "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)
        return "\n".join(text.splitlines()[-lines:])


CommandRunner = Callable[..., CommandResult]


def run_command(args: Sequence[str], timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT) -> CommandResult:
    """Run a command capturing stdout and stderr.

    Returns a :class:`CommandResult`.  Failures to start the process and
    timeouts are converted into results rather than exceptions so a
    single broken tool cannot abort a checker.
    """
    cmd = tuple(str(a) for a in args)
    try:
        completed = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return CommandResult(cmd, EXIT_TIMEOUT, "", f"timed out after {timeout}s")
    except FileNotFoundError:
        return CommandResult(cmd, EXIT_NOT_FOUND, "", f"{cmd[0]}: command not found")
    except OSError as exc:
        return CommandResult(cmd, EXIT_NOT_FOUND, "", f"{cmd[0]}: {exc}")
    return CommandResult(cmd, completed.returncode, completed.stdout, completed.stderr)


__all__ = ["CommandResult", "CommandRunner", "run_command", "EXIT_TIMEOUT", "EXIT_NOT_FOUND"]
