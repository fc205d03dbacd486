"""Tests for the probe adapters.

All commands are answered by a scripted runner; only the mount and
filesystem helpers touch the real (temporary) filesystem.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from conftest import SMART_PASSED, ScriptedRunner, addr_json, link_json

from provcheck.probes import luks, network, smart, zpool
from provcheck.probes.models import ProbeStatus
from provcheck.probes.mounts import TemporaryMount, verify_writable
from provcheck.probes.packages import ToolEnsurer
from provcheck.probes.runner import EXIT_NOT_FOUND, EXIT_TIMEOUT, run_command


def test_run_command_reports_missing_executable() -> None:
    result = run_command(["/nonexistent/provcheck-tool", "--help"])
    assert result.returncode == EXIT_NOT_FOUND
    assert not result.ok


def test_run_command_converts_timeout(monkeypatch) -> None:
    def fake_run(*args, **kwargs):
        raise subprocess.TimeoutExpired(cmd=args[0], timeout=kwargs["timeout"])

    monkeypatch.setattr("provcheck.probes.runner.subprocess.run", fake_run)
    result = run_command(["sleep", "100"], timeout=1)
    assert result.timed_out
    assert result.returncode == EXIT_TIMEOUT


def test_smart_passed(runner: ScriptedRunner) -> None:
    runner.script(["smartctl", "-H", "/dev/sda"], stdout=SMART_PASSED)
    assert smart.smart_health("/dev/sda", runner).status is ProbeStatus.PASS


def test_smart_sas_ok_line(runner: ScriptedRunner) -> None:
    runner.script(["smartctl", "-H", "/dev/sdb"], stdout="SMART Health Status: OK\n")
    assert smart.smart_health("/dev/sdb", runner).passed


def test_smart_failing_bit(runner: ScriptedRunner) -> None:
    runner.script(
        ["smartctl", "-H", "/dev/sda"],
        returncode=8,
        stdout="SMART overall-health self-assessment test result: FAILED!\n",
    )
    assert smart.smart_health("/dev/sda", runner).status is ProbeStatus.FAIL


def test_smart_open_failure_is_unknown(runner: ScriptedRunner) -> None:
    runner.script(["smartctl", "-H", "/dev/sdz"], returncode=2, stderr="No such device")
    probe = smart.smart_health("/dev/sdz", runner)
    assert probe.status is ProbeStatus.UNKNOWN
    assert "No such device" in probe.detail


def test_nvme_critical_warning_fails(runner: ScriptedRunner) -> None:
    runner.script(
        ["smartctl", "-H", "-A", "-d", "nvme", "/dev/nvme0n1"],
        stdout=SMART_PASSED + "Critical Warning:                   0x04\n",
    )
    probe = smart.nvme_smart_health("/dev/nvme0n1", runner)
    assert probe.status is ProbeStatus.FAIL
    assert "0x04" in probe.detail


def test_nvme_healthy(runner: ScriptedRunner) -> None:
    runner.script(
        ["smartctl", "-H", "-A", "-d", "nvme", "/dev/nvme0n1"],
        stdout=SMART_PASSED + "Critical Warning:                   0x00\n",
    )
    assert smart.nvme_smart_health("/dev/nvme0n1", runner).passed


def test_is_nvme() -> None:
    assert smart.is_nvme("/dev/nvme0n1")
    assert not smart.is_nvme("/dev/sda")


def test_tool_ensurer_present_skips_install(runner: ScriptedRunner) -> None:
    ensurer = ToolEnsurer(runner=runner, which=lambda name: f"/usr/sbin/{name}")
    assert ensurer.ensure("smartctl", "smartmontools").passed
    assert runner.calls == []


def test_tool_ensurer_installs_once(runner: ScriptedRunner) -> None:
    installed = {"done": False}

    def which(name):
        return "/usr/sbin/smartctl" if installed["done"] else None

    def fake_runner(args, timeout=None):
        result = runner(args, timeout=timeout)
        if tuple(args[:2]) == ("apt-get", "install"):
            installed["done"] = True
        return result

    runner.script(["apt-get", "update"])
    runner.script(["apt-get", "install", "-y", "smartmontools"])
    ensurer = ToolEnsurer(runner=fake_runner, which=which)
    assert ensurer.ensure("smartctl", "smartmontools").passed
    assert runner.calls == [
        ("apt-get", "update"),
        ("apt-get", "install", "-y", "smartmontools"),
    ]


def test_tool_ensurer_update_failure_stops(runner: ScriptedRunner) -> None:
    runner.script(["apt-get", "update"], returncode=100, stderr="network unreachable")
    ensurer = ToolEnsurer(runner=runner, which=lambda name: None)
    probe = ensurer.ensure("smartctl", "smartmontools")
    assert probe.status is ProbeStatus.FAIL
    assert "update" in probe.detail
    assert not runner.called("apt-get", "install")


def test_luks_probes(runner: ScriptedRunner) -> None:
    runner.script(["cryptsetup", "isLuks", "/dev/sda3"])
    runner.script(["cryptsetup", "luksDump", "/dev/sda3"], stdout="LUKS header information\nVersion: 2\n")
    runner.script(["cryptsetup", "status", "cryptroot"], returncode=4)
    assert luks.header_valid("/dev/sda3", runner).passed
    dump = luks.metadata_readable("/dev/sda3", runner)
    assert dump.passed and dump.detail == ""
    assert luks.mapping_active("cryptroot", runner).status is ProbeStatus.FAIL


def test_pool_health_parsing() -> None:
    assert zpool.PoolHealth.parse("online\n") is zpool.PoolHealth.ONLINE
    assert zpool.PoolHealth.parse("DEGRADED") is zpool.PoolHealth.DEGRADED
    assert zpool.PoolHealth.parse("garbage") is zpool.PoolHealth.UNKNOWN
    assert zpool.PoolHealth.ONLINE.healthy
    assert not zpool.PoolHealth.DEGRADED.healthy


def test_pool_health_degraded_attaches_status(runner: ScriptedRunner) -> None:
    runner.script(["zpool", "list", "-H", "-o", "health", "rpool"], stdout="DEGRADED\n")
    runner.script(["zpool", "status", "-x", "rpool"], stdout="  pool: rpool\n state: DEGRADED\n")
    probe = zpool.pool_health("rpool", runner)
    assert probe.status is ProbeStatus.FAIL
    assert probe.detail.startswith("DEGRADED")
    assert "state: DEGRADED" in probe.detail


def test_pool_health_online(runner: ScriptedRunner) -> None:
    runner.script(["zpool", "list", "-H", "-o", "health", "rpool"], stdout="ONLINE\n")
    assert zpool.pool_health("rpool", runner).passed
    assert not runner.called("zpool", "status")


def test_temporary_mount_cleans_up(runner: ScriptedRunner, mount_parent: Path) -> None:
    runner.script(["mount", "-t", "zfs"])
    runner.script(["umount"])
    with TemporaryMount("rpool/ROOT", "zfs", parent=mount_parent, prefix="rpool_test_", runner=runner) as mount:
        assert mount.mounted
        assert mount.path.is_dir()
        assert mount.path.name.startswith("rpool_test_")
    assert list(mount_parent.iterdir()) == []
    assert runner.called("umount")
    assert mount.cleanup_errors == []


def test_temporary_mount_cleans_up_on_exception(runner: ScriptedRunner, mount_parent: Path) -> None:
    runner.script(["mount", "-t", "zfs"])
    runner.script(["umount"])
    mount = TemporaryMount("rpool/ROOT", "zfs", parent=mount_parent, runner=runner)
    try:
        with mount:
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert list(mount_parent.iterdir()) == []
    assert runner.called("umount")


def test_temporary_mount_failed_mount_removes_directory(runner: ScriptedRunner, mount_parent: Path) -> None:
    runner.script(["mount", "-t", "zfs"], returncode=32, stderr="dataset does not exist")
    with TemporaryMount("rpool/ROOT", "zfs", parent=mount_parent, runner=runner) as mount:
        assert not mount.mounted
    assert list(mount_parent.iterdir()) == []
    assert not runner.called("umount")


def test_temporary_mount_keeps_busy_directory(runner: ScriptedRunner, mount_parent: Path) -> None:
    """A directory whose unmount failed is reported, never removed."""
    runner.script(["mount", "-t", "zfs"])
    runner.script(["umount"], returncode=32, stderr="target is busy")
    with TemporaryMount("rpool/ROOT", "zfs", parent=mount_parent, runner=runner) as mount:
        pass
    assert len(mount.cleanup_errors) == 1
    assert "busy" in mount.cleanup_errors[0]
    assert runner.called("umount", "-l")


def test_temporary_mount_open_failure_leaves_nothing(mount_parent: Path) -> None:
    def failing_runner(args, timeout=None):
        raise RuntimeError("mount interrupted")

    mount = TemporaryMount("rpool/ROOT", "zfs", parent=mount_parent, runner=failing_runner)
    with pytest.raises(RuntimeError):
        mount.open()
    assert list(mount_parent.iterdir()) == []
    assert mount.path is None


def test_temporary_mount_missing_parent_raises(tmp_path: Path, runner: ScriptedRunner) -> None:
    mount = TemporaryMount("rpool/ROOT", "zfs", parent=tmp_path / "absent", runner=runner)
    with pytest.raises(OSError):
        mount.open()
    assert runner.calls == []


def test_verify_writable(tmp_path: Path) -> None:
    assert verify_writable(tmp_path).passed
    assert list(tmp_path.iterdir()) == []
    assert verify_writable(tmp_path / "missing").status is ProbeStatus.FAIL


def test_network_probes(runner: ScriptedRunner, sys_class_net: Path) -> None:
    assert network.interface_exists("eth0", sys_class_net).passed
    assert not network.interface_exists("eth9", sys_class_net).passed
    runner.script(["ip", "-j", "link", "show", "eth0"], stdout=link_json("eth0", up=False))
    runner.script(["ip", "-j", "addr", "show", "eth0"], stdout=addr_json("eth0", "10.0.0.5"))
    assert network.link_up("eth0", runner).status is ProbeStatus.FAIL
    assert network.address_assigned("eth0", "10.0.0.5/24", runner).passed
    assert network.address_assigned("eth0", "10.0.0.6", runner).status is ProbeStatus.FAIL
    assert network.address_assigned("eth0", "not-an-ip", runner).status is ProbeStatus.UNKNOWN


def test_link_up_ignores_lower_up_only(runner: ScriptedRunner) -> None:
    runner.script(
        ["ip", "-j", "link", "show", "eth0"],
        stdout='[{"ifname": "eth0", "flags": ["BROADCAST", "LOWER_UP"], "operstate": "DOWN"}]',
    )
    assert network.link_up("eth0", runner).status is ProbeStatus.FAIL


def test_reachable_uses_single_ping(runner: ScriptedRunner) -> None:
    runner.script(["ping"], returncode=1)
    assert not network.reachable("8.8.8.8", runner).passed
    assert runner.calls == [("ping", "-c", "1", "-W", "2", "8.8.8.8")]
