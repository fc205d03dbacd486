"""Result model shared by all probe adapters."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from .runner import EXIT_NOT_FOUND, EXIT_TIMEOUT, CommandResult


class ProbeStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    # The probe could not reach a verdict (tool missing, timeout, bad output)
    UNKNOWN = "UNKNOWN"


class ProbeResult(BaseModel):
    """Structured outcome of a single probe.

    Attributes:
        status: PASS, FAIL or UNKNOWN.
        detail: Diagnostic text, usually the tail of the tool's output.
    """

    model_config = ConfigDict(frozen=True)

    status: ProbeStatus
    detail: str = ""

    @property
    def passed(self) -> bool:
        return self.status is ProbeStatus.PASS

    @classmethod
    def from_command(cls, result: CommandResult) -> "ProbeResult":
        """Map a command's exit status onto a probe status.

        Exit 0 passes, a timeout or missing executable is UNKNOWN and
        anything else fails.
        """
        if result.ok:
            return cls(status=ProbeStatus.PASS, detail=result.tail())
        if result.returncode in (EXIT_TIMEOUT, EXIT_NOT_FOUND):
            return cls(status=ProbeStatus.UNKNOWN, detail=result.tail())
        return cls(status=ProbeStatus.FAIL, detail=result.tail())


__all__ = ["ProbeStatus", "ProbeResult"]
