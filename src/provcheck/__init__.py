"""Top-level package for provcheck.

provcheck re-inspects a freshly provisioned machine and confirms that its
disks, encrypted volume, ZFS pool, installed system tree and network are
in the expected state.  The command-line interface lives in
:mod:`provcheck.cli`, the checkers in :mod:`provcheck.health` and the
subsystem probes in :mod:`provcheck.probes`.
"""

__version__ = "0.1.0"

__all__ = [
    "cli",
    "config",
    "health",
    "notify",
    "probes",
]
