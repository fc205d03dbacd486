"""Health check package for provcheck.

This package defines the models describing sub-check results and
domain verdicts, one checker per health domain (disks, LUKS, ZFS pool,
installed system, network) and the orchestrator that runs them and
applies the abort policy.
"""

from .models import (
    CONCRETE_DOMAINS,
    CheckOutcome,
    HealthDomain,
    HealthVerdict,
    Severity,
    SubCheckResult,
)
from .orchestrator import Orchestrator, health_check

__all__ = [
    "CONCRETE_DOMAINS",
    "CheckOutcome",
    "HealthDomain",
    "HealthVerdict",
    "Severity",
    "SubCheckResult",
    "Orchestrator",
    "health_check",
]
