"""SMART health probes built on ``smartctl``.

Two variants are provided: the general probe for SATA/SAS drives and an
NVMe probe that additionally inspects the controller's critical warning
byte.  ``smartctl`` encodes its findings as a bitmask in the exit
status, which is decoded before the textual health line is consulted.
"""

from __future__ import annotations

import re

from .models import ProbeResult, ProbeStatus
from .runner import EXIT_NOT_FOUND, EXIT_TIMEOUT, CommandResult, CommandRunner, run_command

SMARTCTL = "smartctl"

# smartctl exit status bits (see smartctl(8), "RETURN VALUES")
_BIT_CMDLINE = 0x01
_BIT_OPEN_FAILED = 0x02
_BIT_DISK_FAILING = 0x08

_HEALTH_PASSED = re.compile(
    r"self-assessment test result:\s*PASSED|SMART Health Status:\s*OK", re.IGNORECASE
)
_HEALTH_FAILED = re.compile(
    r"self-assessment test result:\s*FAILED|SMART Health Status:\s*(?!OK)\S+", re.IGNORECASE
)
_CRITICAL_WARNING = re.compile(r"Critical Warning:\s*(0x[0-9a-fA-F]+|\d+)")


def is_nvme(disk: str) -> bool:
    """Return True when the device identifier names an NVMe device."""
    return "nvme" in disk


def _evaluate(result: CommandResult) -> ProbeResult:
    detail = result.tail()
    if result.returncode in (EXIT_TIMEOUT, EXIT_NOT_FOUND) or result.returncode & (_BIT_CMDLINE | _BIT_OPEN_FAILED):
        return ProbeResult(status=ProbeStatus.UNKNOWN, detail=detail)
    if result.returncode & _BIT_DISK_FAILING:
        return ProbeResult(status=ProbeStatus.FAIL, detail=detail)
    if _HEALTH_PASSED.search(result.stdout):
        return ProbeResult(status=ProbeStatus.PASS, detail=detail)
    if _HEALTH_FAILED.search(result.stdout):
        return ProbeResult(status=ProbeStatus.FAIL, detail=detail)
    return ProbeResult(status=ProbeStatus.UNKNOWN, detail=detail or "no SMART health line in output")


def smart_health(disk: str, runner: CommandRunner = run_command) -> ProbeResult:
    """Query the overall SMART health of a SATA/SAS disk."""
    return _evaluate(runner([SMARTCTL, "-H", disk]))


def nvme_smart_health(disk: str, runner: CommandRunner = run_command) -> ProbeResult:
    """Query SMART health of an NVMe device.

    The drive fails when the health line fails or when the controller
    reports a non-zero critical warning.
    """
    result = runner([SMARTCTL, "-H", "-A", "-d", "nvme", disk])
    verdict = _evaluate(result)
    if verdict.status is not ProbeStatus.PASS:
        return verdict
    match = _CRITICAL_WARNING.search(result.stdout)
    if match and int(match.group(1), 0) != 0:
        return ProbeResult(
            status=ProbeStatus.FAIL,
            detail=f"critical warning {match.group(1)}",
        )
    return verdict


__all__ = ["SMARTCTL", "is_nvme", "smart_health", "nvme_smart_health"]
