"""Common machinery for domain checkers.

A checker subclasses :class:`DomainChecker` and implements
:meth:`DomainChecker.check`, calling :meth:`DomainChecker.record` (or
:meth:`DomainChecker.record_probe`) once per probe.  Every recorded
sub-check is reported to the notification sink immediately, and a
failure never stops the checker: ``check`` decides on its own when a
missing prerequisite makes further probes pointless and simply returns.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ..config import TargetConfiguration
from ..notify import NotificationSink
from ..probes.models import ProbeResult, ProbeStatus
from ..probes.runner import CommandRunner, run_command
from .models import CheckOutcome, HealthDomain, Severity, SubCheckResult


class DomainChecker:
    """Base class for the per-domain checkers.

    Class attributes
    ----------------
    domain : HealthDomain
        The domain this checker reports on.
    required_keys : tuple of str
        Configuration keys that must be set before the checker may run.
    standalone_keys : tuple of str
        Keys that are required only when the checker's domain is
        requested on its own rather than as part of ``all``.
    """

    domain: HealthDomain
    required_keys: Tuple[str, ...] = ()
    standalone_keys: Tuple[str, ...] = ()

    def __init__(
        self,
        config: TargetConfiguration,
        sink: NotificationSink,
        runner: CommandRunner = run_command,
    ) -> None:
        self.config = config
        self.sink = sink
        self.runner = runner
        self._results: List[SubCheckResult] = []

    def run(self) -> CheckOutcome:
        """Run every probe for this domain and return the outcome."""
        self._results = []
        self.check()
        return CheckOutcome(domain=self.domain, sub_checks=list(self._results))

    def check(self) -> None:
        raise NotImplementedError

    def record(
        self,
        label: str,
        passed: bool,
        message: str,
        severity: Severity = Severity.ERROR,
        skipped: bool = False,
    ) -> SubCheckResult:
        """Append a sub-check result and report it to the sink."""
        result = SubCheckResult(label=label, passed=passed, severity=severity, message=message)
        self._results.append(result)
        if skipped:
            self.sink.info(message)
        elif passed:
            self.sink.success(message)
        elif severity is Severity.ERROR:
            self.sink.error(message)
        else:
            self.sink.warning(message)
        return result

    def record_probe(
        self,
        label: str,
        probe: ProbeResult,
        ok_message: str,
        fail_message: str,
        severity: Severity = Severity.ERROR,
    ) -> SubCheckResult:
        """Record a probe result, appending its diagnostics on failure."""
        if probe.passed:
            return self.record(label, True, ok_message, severity)
        message = fail_message
        if probe.status is ProbeStatus.UNKNOWN:
            message = f"{message} (could not determine state)"
        if probe.detail:
            message = f"{message}: {probe.detail}"
        return self.record(label, False, message, severity)

    def value(self, key: str) -> Optional[str]:
        return self.config.get(key)
