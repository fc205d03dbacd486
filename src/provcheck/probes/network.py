"""Network probes built on sysfs, ``ip`` and ``ping``.

Link and address state are read from iproute2's JSON output
(``ip -j``) rather than matched as text, so ``UP`` in a flag such as
``LOWER_UP`` is never mistaken for an administratively up link.
"""

from __future__ import annotations

import ipaddress
import json
from pathlib import Path
from typing import Any, List

from .models import ProbeResult, ProbeStatus
from .runner import CommandResult, CommandRunner, run_command

SYS_CLASS_NET = Path("/sys/class/net")

# ping -W is the per-reply wait in seconds
PING_WAIT_SECONDS = 2
PING_TIMEOUT = 10.0


def interface_exists(interface: str, sys_class_net: Path = SYS_CLASS_NET) -> ProbeResult:
    """The kernel exposes ``/sys/class/net/<interface>``."""
    path = Path(sys_class_net) / interface
    if path.is_dir():
        return ProbeResult(status=ProbeStatus.PASS, detail=str(path))
    return ProbeResult(status=ProbeStatus.FAIL, detail=f"{path} not found")


def _load_json(result: CommandResult) -> List[Any]:
    try:
        data = json.loads(result.stdout or "[]")
    except json.JSONDecodeError:
        return []
    return data if isinstance(data, list) else []


def link_up(interface: str, runner: CommandRunner = run_command) -> ProbeResult:
    """``ip -j link show``: the interface carries the ``UP`` flag."""
    result = runner(["ip", "-j", "link", "show", interface])
    if not result.ok:
        return ProbeResult.from_command(result)
    links = _load_json(result)
    if not links:
        return ProbeResult(status=ProbeStatus.UNKNOWN, detail="unparseable ip link output")
    flags = links[0].get("flags", [])
    operstate = links[0].get("operstate", "UNKNOWN")
    detail = f"flags={','.join(flags)} operstate={operstate}"
    if "UP" in flags:
        return ProbeResult(status=ProbeStatus.PASS, detail=detail)
    return ProbeResult(status=ProbeStatus.FAIL, detail=detail)


def address_assigned(interface: str, expected: str, runner: CommandRunner = run_command) -> ProbeResult:
    """``ip -j addr show``: ``expected`` is bound to the interface.

    ``expected`` may be a bare address or CIDR notation; only the host
    address is compared.
    """
    try:
        wanted = ipaddress.ip_interface(expected.strip()).ip
    except ValueError:
        return ProbeResult(status=ProbeStatus.UNKNOWN, detail=f"invalid address {expected!r}")
    result = runner(["ip", "-j", "addr", "show", interface])
    if not result.ok:
        return ProbeResult.from_command(result)
    bound = []
    for link in _load_json(result):
        for info in link.get("addr_info", []):
            local = info.get("local")
            if not local:
                continue
            try:
                bound.append(ipaddress.ip_address(local))
            except ValueError:
                continue
    detail = ", ".join(str(a) for a in bound) or "no addresses"
    if wanted in bound:
        return ProbeResult(status=ProbeStatus.PASS, detail=detail)
    return ProbeResult(status=ProbeStatus.FAIL, detail=detail)


def reachable(target: str, runner: CommandRunner = run_command) -> ProbeResult:
    """Send a single ICMP echo to ``target``."""
    result = runner(
        ["ping", "-c", "1", "-W", str(PING_WAIT_SECONDS), target],
        timeout=PING_TIMEOUT,
    )
    return ProbeResult.from_command(result)


__all__ = [
    "SYS_CLASS_NET",
    "interface_exists",
    "link_up",
    "address_assigned",
    "reachable",
]
