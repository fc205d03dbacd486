"""ZFS pool probes built on ``zpool``.

Pool health is read from the scripted ``zpool list -H -o health``
output and parsed into :class:`PoolHealth`.  The health tokens are the
vdev states documented in zpoolconcepts(7); only ``ONLINE`` counts as
healthy.  All matching against zpool output happens in this module.
"""

from __future__ import annotations

from enum import Enum

from .models import ProbeResult, ProbeStatus
from .runner import CommandRunner, run_command

ZPOOL = "zpool"

SCRUB_TIMEOUT = 60.0


class PoolHealth(str, Enum):
    ONLINE = "ONLINE"
    DEGRADED = "DEGRADED"
    FAULTED = "FAULTED"
    OFFLINE = "OFFLINE"
    UNAVAIL = "UNAVAIL"
    REMOVED = "REMOVED"
    SUSPENDED = "SUSPENDED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, text: str) -> "PoolHealth":
        token = text.strip().upper()
        try:
            return cls(token)
        except ValueError:
            return cls.UNKNOWN

    @property
    def healthy(self) -> bool:
        return self is PoolHealth.ONLINE


def pool_exists(pool: str, runner: CommandRunner = run_command) -> ProbeResult:
    """``zpool list``: the pool is imported on this host."""
    return ProbeResult.from_command(runner([ZPOOL, "list", "-H", "-o", "name", pool]))


def read_pool_health(pool: str, runner: CommandRunner = run_command) -> PoolHealth:
    """Return the pool's health state, UNKNOWN if it cannot be read."""
    result = runner([ZPOOL, "list", "-H", "-o", "health", pool])
    if not result.ok:
        return PoolHealth.UNKNOWN
    lines = result.stdout.strip().splitlines()
    return PoolHealth.parse(lines[0]) if lines else PoolHealth.UNKNOWN


def pool_health(pool: str, runner: CommandRunner = run_command) -> ProbeResult:
    """Check that the pool reports ``ONLINE``.

    When it does not, the terse ``zpool status -x`` report is attached
    as the diagnostic detail.
    """
    health = read_pool_health(pool, runner)
    if health.healthy:
        return ProbeResult(status=ProbeStatus.PASS, detail=health.value)
    status = runner([ZPOOL, "status", "-x", pool])
    detail = health.value
    if status.tail():
        detail = f"{health.value}: {status.tail()}"
    if health is PoolHealth.UNKNOWN:
        return ProbeResult(status=ProbeStatus.UNKNOWN, detail=detail)
    return ProbeResult(status=ProbeStatus.FAIL, detail=detail)


def start_scrub(pool: str, runner: CommandRunner = run_command) -> ProbeResult:
    """``zpool scrub``: start a scrub; it continues in the background."""
    return ProbeResult.from_command(runner([ZPOOL, "scrub", pool], timeout=SCRUB_TIMEOUT))


__all__ = ["ZPOOL", "PoolHealth", "pool_exists", "read_pool_health", "pool_health", "start_scrub"]
