"""Probe adapters for provcheck.

Each adapter wraps one subsystem inspection command and returns a
:class:`~provcheck.probes.models.ProbeResult`.  All external processes
are spawned through a :data:`~provcheck.probes.runner.CommandRunner`.
"""

from .models import ProbeResult, ProbeStatus
from .runner import CommandResult, CommandRunner, run_command
from .packages import ToolEnsurer
from .mounts import TemporaryMount, verify_writable
from .zpool import PoolHealth

__all__ = [
    "ProbeResult",
    "ProbeStatus",
    "CommandResult",
    "CommandRunner",
    "run_command",
    "ToolEnsurer",
    "TemporaryMount",
    "verify_writable",
    "PoolHealth",
]
