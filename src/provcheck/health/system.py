"""Installed-system integrity checker."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

from .base import DomainChecker
from .models import HealthDomain

CRITICAL_DIRECTORIES: Tuple[str, ...] = ("/boot", "/etc", "/bin", "/sbin", "/lib", "/usr")
CRITICAL_FILES: Tuple[str, ...] = ("/etc/fstab", "/etc/crypttab", "/etc/default/grub")
KERNEL_PATTERN = "vmlinuz-*"
INITRAMFS_PATTERN = "initrd.img-*"


def _under(root: Path, path: str) -> Path:
    return root / path.lstrip("/")


class SystemChecker(DomainChecker):
    """Check that the new system tree at ``NEW_SYSTEM_MOUNT`` is complete.

    Missing directories and configuration files are reported one by
    one so the operator sees exactly what is absent.
    """

    domain = HealthDomain.INSTALLED_SYSTEM
    required_keys = ("NEW_SYSTEM_MOUNT",)

    def check(self) -> None:
        root = Path(self.value("NEW_SYSTEM_MOUNT"))
        self.sink.info(f"Checking system integrity for mount point {root}")

        if not root.is_dir():
            self.record("system:root", False, f"New system mount point {root} doesn't exist")
            return

        for directory in CRITICAL_DIRECTORIES:
            if _under(root, directory).is_dir():
                self.record(f"system:dir:{directory}", True, f"Critical directory exists: {directory}")
            else:
                self.record(f"system:dir:{directory}", False, f"Critical directory missing: {directory}")

        boot = root / "boot"
        if any(boot.glob(KERNEL_PATTERN)):
            self.record("system:kernel", True, f"Kernel found in {boot}/")
        else:
            self.record("system:kernel", False, f"No kernel found in {boot}/")
        if any(boot.glob(INITRAMFS_PATTERN)):
            self.record("system:initramfs", True, f"Initramfs found in {boot}/")
        else:
            self.record("system:initramfs", False, f"No initramfs found in {boot}/")

        for conf_file in CRITICAL_FILES:
            if _under(root, conf_file).is_file():
                self.record(f"system:file:{conf_file}", True, f"Critical config file exists: {conf_file}")
            else:
                self.record(f"system:file:{conf_file}", False, f"Critical config file missing: {conf_file}")
