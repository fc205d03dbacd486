"""Ensure a diagnostic tool is installed.

:class:`ToolEnsurer` checks ``PATH`` for an executable and, when it is
missing, makes exactly one best-effort attempt to install the package
that provides it with ``apt-get update`` followed by
``apt-get install -y``.  Checkers receive an ensurer instance so tests
can substitute one that never touches the package manager.
"""

from __future__ import annotations

import shutil
from typing import Callable, Optional

from .models import ProbeResult, ProbeStatus
from .runner import CommandRunner, run_command

# Package installs can be slow on a fresh system
INSTALL_TIMEOUT = 600.0


class ToolEnsurer:
    """Make sure an executable is available, installing it if needed.

    Parameters
    ----------
    runner : CommandRunner
        Used for the ``apt-get`` invocations.
    which : callable
        ``shutil.which`` compatible lookup, injectable for tests.
    """

    def __init__(
        self,
        runner: CommandRunner = run_command,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> None:
        self.runner = runner
        self.which = which

    def ensure(self, executable: str, package: str) -> ProbeResult:
        """Return PASS if ``executable`` is (now) on PATH, FAIL otherwise."""
        if self.which(executable):
            return ProbeResult(status=ProbeStatus.PASS, detail=f"{executable} found")
        update = self.runner(["apt-get", "update"], timeout=INSTALL_TIMEOUT)
        if not update.ok:
            return ProbeResult(
                status=ProbeStatus.FAIL,
                detail=f"Failed to update package repository: {update.tail()}",
            )
        install = self.runner(["apt-get", "install", "-y", package], timeout=INSTALL_TIMEOUT)
        if not install.ok:
            return ProbeResult(
                status=ProbeStatus.FAIL,
                detail=f"Failed to install {package}: {install.tail()}",
            )
        if not self.which(executable):
            return ProbeResult(
                status=ProbeStatus.FAIL,
                detail=f"{package} installed but {executable} is still not on PATH",
            )
        return ProbeResult(status=ProbeStatus.PASS, detail=f"installed {package}")


__all__ = ["ToolEnsurer", "INSTALL_TIMEOUT"]
