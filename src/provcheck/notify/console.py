"""Console notification sink.

Messages are printed through :mod:`click` with a colored level prefix.
Errors always go to stderr; with ``to_stderr`` every message does, which
keeps stdout free for the ``--json`` report.  The confirmation prompt
blocks until the operator answers unless an answer was fixed up front
(``--scrub/--no-scrub``).
"""

from __future__ import annotations

from typing import Optional, Protocol

import click


class NotificationSink(Protocol):
    """Receiver for check events and yes/no confirmations."""

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def confirm(self, question: str) -> bool: ...


class ConsoleSink:
    """Write events to the terminal using colored level prefixes.

    Args:
        assume: Fixed answer for :meth:`confirm`.  ``None`` prompts the
            operator interactively.
        to_stderr: Send every message to stderr, not only errors.
    """

    def __init__(self, assume: Optional[bool] = None, to_stderr: bool = False) -> None:
        self.assume = assume
        self.to_stderr = to_stderr

    def _emit(self, tag: str, color: str, message: str, err: bool = False) -> None:
        click.echo(
            f"{click.style(tag, fg=color, bold=True)} {message}",
            err=err or self.to_stderr,
        )

    def info(self, message: str) -> None:
        self._emit("[INFO]", "blue", message)

    def success(self, message: str) -> None:
        self._emit("[OK]", "green", message)

    def warning(self, message: str) -> None:
        self._emit("[WARN]", "yellow", message)

    def error(self, message: str) -> None:
        self._emit("[ERROR]", "red", message, err=True)

    def confirm(self, question: str) -> bool:
        if self.assume is not None:
            self.info(f"{question} [{'yes' if self.assume else 'no'}, preset]")
            return self.assume
        # No timeout: an attended installation session is assumed
        return click.confirm(question, default=False, err=self.to_stderr)
