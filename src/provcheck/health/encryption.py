"""LUKS integrity checker."""

from __future__ import annotations

from ..probes import luks
from .base import DomainChecker
from .models import HealthDomain, Severity


class EncryptionChecker(DomainChecker):
    """Verify the LUKS header, its metadata and the active mapping.

    The three probes are independent and all run.  The mapping probe
    passes vacuously when ``LUKS_MAPPED_NAME`` is unset, since an
    unmapped device is valid early in an installation.

    ``LUKS_DEVICE`` is required when ``luks`` is checked on its own.
    Under ``all`` an unset device means the system is installed without
    encryption and the domain only records a warning.
    """

    domain = HealthDomain.ENCRYPTION
    standalone_keys = ("LUKS_DEVICE",)

    def check(self) -> None:
        device = self.value("LUKS_DEVICE")
        if not device:
            self.record(
                "luks:device",
                False,
                "No LUKS device configured; skipping encryption checks",
                severity=Severity.WARNING,
            )
            return
        self.sink.info(f"Checking LUKS integrity for {device}")
        self.record_probe(
            "luks:header",
            luks.header_valid(device, self.runner),
            f"LUKS header verification passed for {device}",
            f"LUKS header check failed for {device}",
        )
        self.record_probe(
            "luks:metadata",
            luks.metadata_readable(device, self.runner),
            "LUKS metadata integrity verified",
            "LUKS metadata integrity check failed",
        )
        mapped_name = self.value("LUKS_MAPPED_NAME")
        if not mapped_name:
            self.record(
                "luks:mapping",
                True,
                "No LUKS mapped name configured; mapping check skipped",
                skipped=True,
            )
            return
        self.record_probe(
            "luks:mapping",
            luks.mapping_active(mapped_name, self.runner),
            f"LUKS device mapping check passed for {mapped_name}",
            f"LUKS device mapping check failed for {mapped_name}",
        )
