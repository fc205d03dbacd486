"""Scoped temporary mounts and filesystem probes.

:class:`TemporaryMount` creates a uniquely named directory, mounts a
filesystem on it and, on leaving the ``with`` block, unmounts it and
removes the directory again.  Cleanup runs on every exit path,
including exceptions raised inside the block.  Problems met while
cleaning up are collected in :attr:`TemporaryMount.cleanup_errors`
rather than raised, so the caller can report them as check results.
"""

from __future__ import annotations

import tempfile
import uuid
from pathlib import Path
from typing import List, Optional

from .models import ProbeResult, ProbeStatus
from .runner import CommandRunner, run_command

DEFAULT_MOUNT_PARENT = Path("/mnt")

MARKER_TEXT = "provcheck write test\n"


class TemporaryMount:
    """Mount ``source`` on a fresh temporary directory for a ``with`` block.

    Parameters
    ----------
    source : str
        Device or dataset to mount (e.g. ``rpool/ROOT``).
    fstype : str
        Filesystem type passed to ``mount -t``.
    parent : pathlib.Path
        Directory in which the temporary mount point is created.
    prefix : str
        Name prefix of the temporary directory.
    runner : CommandRunner
        Used for ``mount`` and ``umount``.
    """

    def __init__(
        self,
        source: str,
        fstype: str,
        parent: Path = DEFAULT_MOUNT_PARENT,
        prefix: str = "provcheck_",
        runner: CommandRunner = run_command,
    ) -> None:
        self.source = source
        self.fstype = fstype
        self.parent = Path(parent)
        self.prefix = prefix
        self.runner = runner
        self.path: Optional[Path] = None
        self.mounted = False
        self.mount_result: Optional[ProbeResult] = None
        self.cleanup_errors: List[str] = []

    def __enter__(self) -> "TemporaryMount":
        self.open()
        return self

    def open(self) -> None:
        """Create the mount point and try to mount ``source`` on it.

        Raises OSError only when the mount point cannot be created, in
        which case nothing is left behind.  A failed ``mount`` is not an
        exception; check :attr:`mounted`.
        """
        self.path = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.parent))
        try:
            result = self.runner(["mount", "-t", self.fstype, self.source, str(self.path)])
        except BaseException:
            self.release()
            raise
        self.mount_result = ProbeResult.from_command(result)
        self.mounted = result.ok

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False

    def release(self) -> None:
        """Unmount and remove the mount point.  Safe to call twice."""
        if self.path is None:
            return
        if self.mounted:
            result = self.runner(["umount", str(self.path)])
            if not result.ok:
                # Fall back to a lazy unmount so the directory can go
                lazy = self.runner(["umount", "-l", str(self.path)])
                if not lazy.ok:
                    self.cleanup_errors.append(
                        f"Failed to unmount {self.path}: {lazy.tail() or result.tail()}"
                    )
                    # Never remove a directory that still has a filesystem on it
                    return
            self.mounted = False
        try:
            self.path.rmdir()
        except FileNotFoundError:
            pass
        except OSError as exc:
            self.cleanup_errors.append(f"Failed to remove mount point {self.path}: {exc}")
            return
        self.path = None


def verify_writable(directory: Path) -> ProbeResult:
    """Write a marker file into ``directory``, read it back and delete it."""
    marker = Path(directory) / f".provcheck-{uuid.uuid4().hex}"
    try:
        marker.write_text(MARKER_TEXT, encoding="utf-8")
        content = marker.read_text(encoding="utf-8")
    except OSError as exc:
        return ProbeResult(status=ProbeStatus.FAIL, detail=str(exc))
    finally:
        try:
            marker.unlink()
        except OSError:
            pass
    if content != MARKER_TEXT:
        return ProbeResult(status=ProbeStatus.FAIL, detail="marker file content mismatch")
    return ProbeResult(status=ProbeStatus.PASS, detail=str(directory))


__all__ = ["DEFAULT_MOUNT_PARENT", "TemporaryMount", "verify_writable"]
