"""Pydantic models for provcheck health checks.

These models define the structured output of a verification run.  Each
probe a checker performs produces a :class:`SubCheckResult`; a checker
folds its sub-checks into one :class:`CheckOutcome` per domain, and the
orchestrator folds the outcomes into a :class:`HealthVerdict`.  All
models are frozen once built.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..errors import UnknownDomainError


class HealthDomain(str, Enum):
    """A health component that can be requested by name."""

    DISKS = "disks"
    ENCRYPTION = "luks"
    STORAGE_POOL = "zfs"
    INSTALLED_SYSTEM = "system"
    NETWORK = "network"
    ALL = "all"

    @classmethod
    def parse(cls, name: str) -> "HealthDomain":
        """Resolve a component name, raising :class:`UnknownDomainError`."""
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            raise UnknownDomainError(name, [d.value for d in cls]) from None

    def expand(self) -> Tuple["HealthDomain", ...]:
        """Return the concrete domains this request covers, in run order."""
        if self is HealthDomain.ALL:
            return CONCRETE_DOMAINS
        return (self,)


# Fixed execution order for ``all``
CONCRETE_DOMAINS: Tuple[HealthDomain, ...] = (
    HealthDomain.DISKS,
    HealthDomain.ENCRYPTION,
    HealthDomain.STORAGE_POOL,
    HealthDomain.INSTALLED_SYSTEM,
    HealthDomain.NETWORK,
)


class Severity(str, Enum):
    """Weight of a failed sub-check.

    Only ERROR failures fail a domain.  WARNING failures are soft
    signals such as a missing default route in an air-gapped install.
    """

    ERROR = "ERROR"
    WARNING = "WARNING"


class SubCheckResult(BaseModel):
    """Result of a single probe within a domain.

    Attributes:
        label: Short identifier for the probe, e.g. ``smart:/dev/sda``.
        passed: Whether the probe found the expected state.
        severity: How much a failure counts (ERROR or WARNING).
        message: Human-readable description of the finding.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    passed: bool
    severity: Severity = Severity.ERROR
    message: str

    @property
    def is_error(self) -> bool:
        """True for a failed ERROR-severity sub-check."""
        return not self.passed and self.severity is Severity.ERROR


class CheckOutcome(BaseModel):
    """Verdict for one health domain.

    ``passed`` is derived: it is False exactly when at least one
    ERROR-severity sub-check failed.  A domain with no sub-checks passes.
    """

    model_config = ConfigDict(frozen=True)

    domain: HealthDomain
    sub_checks: List[SubCheckResult] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        return not any(check.is_error for check in self.sub_checks)

    @property
    def errors(self) -> List[SubCheckResult]:
        return [check for check in self.sub_checks if check.is_error]

    @property
    def warnings(self) -> List[SubCheckResult]:
        return [
            check
            for check in self.sub_checks
            if not check.passed and check.severity is Severity.WARNING
        ]


class HealthVerdict(BaseModel):
    """Aggregated result of one orchestrator run.

    ``aborted`` is set when the run was made with the abort policy and
    the aggregate failed; the outermost caller is expected to terminate
    the installation in that case.
    """

    model_config = ConfigDict(frozen=True)

    component: HealthDomain
    outcomes: List[CheckOutcome]
    aborted: bool = False
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc).replace(microsecond=0)
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        return all(outcome.passed for outcome in self.outcomes)

    def outcome(self, domain: HealthDomain) -> CheckOutcome:
        """Return the outcome recorded for ``domain``."""
        for outcome in self.outcomes:
            if outcome.domain is domain:
                return outcome
        raise KeyError(domain.value)

    @property
    def error_count(self) -> int:
        return sum(len(outcome.errors) for outcome in self.outcomes)

    @property
    def warning_count(self) -> int:
        return sum(len(outcome.warnings) for outcome in self.outcomes)
