"""ZFS pool health checker."""

from __future__ import annotations

from pathlib import Path

from ..config import TargetConfiguration
from ..notify import NotificationSink
from ..probes import zpool
from ..probes.mounts import DEFAULT_MOUNT_PARENT, TemporaryMount, verify_writable
from ..probes.runner import CommandRunner, run_command
from .base import DomainChecker
from .models import HealthDomain, Severity

# Dataset mounted for the write test, relative to the pool
ROOT_DATASET = "ROOT"


class PoolChecker(DomainChecker):
    """Verify the ZFS pool named by ``ZFS_POOL_NAME``.

    Order of probes:

    1. existence (a missing pool ends the check with one error),
    2. health state, which must be ``ONLINE``,
    3. an optional scrub, offered through ``sink.confirm``,
    4. a write test on ``<pool>/ROOT`` mounted at a temporary directory.

    The scrub answer never affects the verdict.  A failed mount is only a
    warning because the root dataset may not exist yet; a failed write or
    a failed cleanup of the temporary mount is an error.
    """

    domain = HealthDomain.STORAGE_POOL
    required_keys = ("ZFS_POOL_NAME",)

    def __init__(
        self,
        config: TargetConfiguration,
        sink: NotificationSink,
        runner: CommandRunner = run_command,
        mount_parent: Path = DEFAULT_MOUNT_PARENT,
    ) -> None:
        super().__init__(config, sink, runner)
        self.mount_parent = Path(mount_parent)

    def check(self) -> None:
        pool = self.value("ZFS_POOL_NAME")
        self.sink.info(f"Checking ZFS pool health for {pool}")

        exists = zpool.pool_exists(pool, self.runner)
        if not exists.passed:
            # A missing zpool binary or a timeout is reported with its output
            self.record_probe(
                "zfs:exists",
                exists,
                f"ZFS pool {pool} exists",
                f"ZFS pool {pool} doesn't exist",
            )
            return

        self.record_probe(
            "zfs:health",
            zpool.pool_health(pool, self.runner),
            f"ZFS pool {pool} is healthy",
            f"ZFS pool {pool} is not healthy",
        )

        self._offer_scrub(pool)
        self._write_test(pool)

    def _offer_scrub(self, pool: str) -> None:
        question = (
            f"ZFS Health Verification: Would you like to perform a scrub on ZFS pool "
            f"{pool} to verify data integrity?\n\nThis will take some time but helps "
            f"ensure your storage is correctly configured."
        )
        if not self.sink.confirm(question):
            self.sink.info(f"Scrub of {pool} skipped")
            return
        # The scrub runs in the background; only its start is checked
        self.record_probe(
            "zfs:scrub",
            zpool.start_scrub(pool, self.runner),
            f"ZFS scrub started on {pool}; check 'zpool status' later for results",
            f"Could not start ZFS scrub on {pool}",
            severity=Severity.WARNING,
        )

    def _write_test(self, pool: str) -> None:
        dataset = f"{pool}/{ROOT_DATASET}"
        mount = TemporaryMount(
            dataset,
            fstype="zfs",
            parent=self.mount_parent,
            prefix=f"{pool}_test_",
            runner=self.runner,
        )
        try:
            mount.open()
        except OSError as exc:
            self.record(
                "zfs:mount",
                False,
                f"Could not create temporary mount point under {self.mount_parent}: {exc}",
                severity=Severity.WARNING,
            )
            return
        try:
            if not mount.mounted:
                self.record(
                    "zfs:mount",
                    False,
                    f"Could not mount ZFS filesystem {dataset} for testing (may not exist yet)",
                    severity=Severity.WARNING,
                )
            else:
                self.record_probe(
                    "zfs:write",
                    verify_writable(mount.path),
                    "Successfully wrote test file to ZFS filesystem",
                    "Failed to write test file to ZFS filesystem",
                )
        except OSError as exc:
            self.record("zfs:write-test", False, f"ZFS write test interrupted: {exc}")
        finally:
            mount.release()
            for problem in mount.cleanup_errors:
                self.record("zfs:cleanup", False, problem)
