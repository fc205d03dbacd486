"""Disk health checker using SMART diagnostics."""

from __future__ import annotations

from typing import Optional

from ..config import TargetConfiguration
from ..notify import NotificationSink
from ..probes import smart
from ..probes.packages import ToolEnsurer
from ..probes.runner import CommandRunner, run_command
from .base import DomainChecker
from .models import HealthDomain

SMART_PACKAGE = "smartmontools"


class DiskChecker(DomainChecker):
    """Check SMART health of every disk listed in ``TARGET_DISKS``.

    ``smartctl`` is installed on demand through the injected
    :class:`ToolEnsurer`; if that fails the domain records a single
    error and no disk is probed.  An empty disk list passes with no
    sub-checks.
    """

    domain = HealthDomain.DISKS

    def __init__(
        self,
        config: TargetConfiguration,
        sink: NotificationSink,
        runner: CommandRunner = run_command,
        ensurer: Optional[ToolEnsurer] = None,
    ) -> None:
        super().__init__(config, sink, runner)
        self.ensurer = ensurer or ToolEnsurer(runner=runner)

    def check(self) -> None:
        self.sink.info("Checking disk health with SMART diagnostics...")
        disks = self.config.disks
        if not disks:
            self.sink.info("No target disks configured; nothing to check")
            return
        tool = self.ensurer.ensure(smart.SMARTCTL, SMART_PACKAGE)
        if not tool.passed:
            self.record(
                "smart:tool",
                False,
                f"SMART diagnostic tool unavailable: {tool.detail}",
            )
            return
        for disk in disks:
            self.sink.info(f"Checking SMART status for {disk}")
            if smart.is_nvme(disk):
                probe = smart.nvme_smart_health(disk, self.runner)
            else:
                probe = smart.smart_health(disk, self.runner)
            self.record_probe(
                f"smart:{disk}",
                probe,
                f"SMART health check passed for {disk}",
                f"SMART health check failed for {disk}",
            )
