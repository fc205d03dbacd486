"""LUKS probes built on ``cryptsetup``."""

from __future__ import annotations

from .models import ProbeResult
from .runner import CommandRunner, run_command

CRYPTSETUP = "cryptsetup"


def header_valid(device: str, runner: CommandRunner = run_command) -> ProbeResult:
    """``cryptsetup isLuks``: the device carries a readable LUKS header."""
    return ProbeResult.from_command(runner([CRYPTSETUP, "isLuks", device]))


def metadata_readable(device: str, runner: CommandRunner = run_command) -> ProbeResult:
    """``cryptsetup luksDump``: the header metadata can be dumped."""
    result = runner([CRYPTSETUP, "luksDump", device])
    probe = ProbeResult.from_command(result)
    # The dump lists key slots; keep only the outcome, not the full dump
    if probe.passed:
        return probe.model_copy(update={"detail": ""})
    return probe


def mapping_active(mapped_name: str, runner: CommandRunner = run_command) -> ProbeResult:
    """``cryptsetup status``: the mapped device is active."""
    return ProbeResult.from_command(runner([CRYPTSETUP, "status", mapped_name]))


__all__ = ["CRYPTSETUP", "header_valid", "metadata_readable", "mapping_active"]
