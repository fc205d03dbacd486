"""Network connectivity checker."""

from __future__ import annotations

from pathlib import Path

from ..config import TargetConfiguration
from ..notify import NotificationSink
from ..probes import network
from ..probes.runner import CommandRunner, run_command
from .base import DomainChecker
from .models import HealthDomain, Severity


class NetworkChecker(DomainChecker):
    """Check the interface named by ``NETWORK_INTERFACE``.

    Only a missing interface or a link that is down fail the domain.  An
    unassigned address or failed ping are warnings: addresses can still
    be settling and air-gapped installs are legitimate.
    """

    domain = HealthDomain.NETWORK
    required_keys = ("NETWORK_INTERFACE",)

    def __init__(
        self,
        config: TargetConfiguration,
        sink: NotificationSink,
        runner: CommandRunner = run_command,
        sys_class_net: Path = network.SYS_CLASS_NET,
    ) -> None:
        super().__init__(config, sink, runner)
        self.sys_class_net = Path(sys_class_net)

    def check(self) -> None:
        interface = self.value("NETWORK_INTERFACE")
        self.sink.info(f"Checking network connectivity for interface {interface}")

        if not network.interface_exists(interface, self.sys_class_net).passed:
            self.record("network:exists", False, f"Network interface {interface} does not exist")
            return

        self.record_probe(
            "network:link",
            network.link_up(interface, self.runner),
            f"Network interface {interface} is up",
            f"Network interface {interface} is down",
        )

        ip = self.value("IP_ADDRESS")
        if ip:
            self.record_probe(
                "network:address",
                network.address_assigned(interface, ip, self.runner),
                f"IP address {ip} is assigned to {interface}",
                f"IP address {ip} is not assigned to {interface}",
                severity=Severity.WARNING,
            )
        else:
            self.record(
                "network:address",
                True,
                "No IP_ADDRESS configured; address check skipped",
                severity=Severity.WARNING,
                skipped=True,
            )

        target = self.config.reachability_target
        self.record_probe(
            "network:reachability",
            network.reachable(target, self.runner),
            "Internet connectivity test passed",
            f"Internet connectivity test failed (ping {target})",
            severity=Severity.WARNING,
        )
