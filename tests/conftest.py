"""Shared fixtures for the provcheck test suite.

The checkers never spawn processes in tests: every external command is
answered by a :class:`ScriptedRunner` and every notification is captured
by a :class:`RecordingSink`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from provcheck.config import TargetConfiguration
from provcheck.probes.models import ProbeResult, ProbeStatus
from provcheck.probes.runner import CommandResult


class RecordingSink:
    """Notification sink that records events and answers prompts."""

    def __init__(self, answer: bool = False) -> None:
        self.answer = answer
        self.events: List[Tuple[str, str]] = []
        self.questions: List[str] = []

    def info(self, message: str) -> None:
        self.events.append(("info", message))

    def success(self, message: str) -> None:
        self.events.append(("success", message))

    def warning(self, message: str) -> None:
        self.events.append(("warning", message))

    def error(self, message: str) -> None:
        self.events.append(("error", message))

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer

    def messages(self, level: str) -> List[str]:
        return [message for lvl, message in self.events if lvl == level]


class ScriptedRunner:
    """Command runner answering from a table of command prefixes.

    The longest matching prefix wins.  Unscripted commands behave like a
    missing executable (exit 127).
    """

    def __init__(self) -> None:
        self.table: Dict[Tuple[str, ...], CommandResult] = {}
        self.calls: List[Tuple[str, ...]] = []

    def script(self, prefix: Sequence[str], returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        key = tuple(prefix)
        self.table[key] = CommandResult(key, returncode, stdout, stderr)

    def __call__(self, args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        cmd = tuple(str(a) for a in args)
        self.calls.append(cmd)
        best: Optional[Tuple[str, ...]] = None
        for prefix in self.table:
            if cmd[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return CommandResult(cmd, 127, "", f"{cmd[0]}: not scripted")
        result = self.table[best]
        return CommandResult(cmd, result.returncode, result.stdout, result.stderr)

    def called(self, *prefix: str) -> bool:
        return any(call[: len(prefix)] == prefix for call in self.calls)


class FakeEnsurer:
    """Tool ensurer that never touches a package manager."""

    def __init__(self, available: bool = True) -> None:
        status = ProbeStatus.PASS if available else ProbeStatus.FAIL
        self.result = ProbeResult(status=status, detail="" if available else "Failed to install smartmontools")
        self.calls: List[Tuple[str, str]] = []

    def ensure(self, executable: str, package: str):
        self.calls.append((executable, package))
        return self.result


SMART_PASSED = "SMART overall-health self-assessment test result: PASSED\n"


def link_json(name: str, up: bool = True) -> str:
    flags = ["BROADCAST", "MULTICAST", "UP", "LOWER_UP"] if up else ["BROADCAST", "MULTICAST"]
    return json.dumps([{"ifname": name, "flags": flags, "operstate": "UP" if up else "DOWN"}])


def addr_json(name: str, *addresses: str) -> str:
    infos = [{"family": "inet", "local": a, "prefixlen": 24} for a in addresses]
    return json.dumps([{"ifname": name, "addr_info": infos}])


def build_system_tree(root: Path, skip: Sequence[str] = ()) -> Path:
    """Create a minimal installed-system tree under ``root``.

    Paths listed in ``skip`` (relative, e.g. ``"etc/crypttab"``) are
    left out.
    """
    for directory in ["boot", "etc", "etc/default", "bin", "sbin", "lib", "usr"]:
        if directory not in skip:
            (root / directory).mkdir(parents=True, exist_ok=True)
    for file in [
        "boot/vmlinuz-6.8.12-4-pve",
        "boot/initrd.img-6.8.12-4-pve",
        "etc/fstab",
        "etc/crypttab",
        "etc/default/grub",
    ]:
        path = root / file
        if file in skip or not path.parent.is_dir():
            continue
        path.write_text("", encoding="utf-8")
    return root


def healthy_runner(pool: str = "rpool", interface: str = "eth0", ip: str = "10.0.0.5") -> ScriptedRunner:
    """Runner scripted for a fully healthy machine."""
    runner = ScriptedRunner()
    runner.script(["smartctl", "-H"], stdout=SMART_PASSED)
    runner.script(["cryptsetup"], 0)
    runner.script(["zpool", "list", "-H", "-o", "name", pool], stdout=f"{pool}\n")
    runner.script(["zpool", "list", "-H", "-o", "health", pool], stdout="ONLINE\n")
    runner.script(["zpool", "scrub", pool])
    runner.script(["mount", "-t", "zfs"])
    runner.script(["umount"])
    runner.script(["ip", "-j", "link", "show", interface], stdout=link_json(interface))
    runner.script(["ip", "-j", "addr", "show", interface], stdout=addr_json(interface, ip))
    runner.script(["ping"])
    return runner


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture
def sys_class_net(tmp_path: Path) -> Path:
    """A fake ``/sys/class/net`` containing ``eth0``."""
    net = tmp_path / "sys_class_net"
    (net / "eth0").mkdir(parents=True)
    return net


@pytest.fixture
def mount_parent(tmp_path: Path) -> Path:
    parent = tmp_path / "mnt"
    parent.mkdir()
    return parent


@pytest.fixture
def config_factory():
    def _make(**values: str) -> TargetConfiguration:
        return TargetConfiguration.from_mapping(values)

    return _make
