"""Unit tests for the health check models."""

from __future__ import annotations

import pytest

from provcheck.errors import UnknownDomainError
from provcheck.health.models import (
    CONCRETE_DOMAINS,
    CheckOutcome,
    HealthDomain,
    HealthVerdict,
    Severity,
    SubCheckResult,
)


def _sub(passed: bool, severity: Severity = Severity.ERROR) -> SubCheckResult:
    return SubCheckResult(label="x", passed=passed, severity=severity, message="m")


def test_outcome_passes_when_only_warnings_fail() -> None:
    """Warning-severity failures never flip a domain to failed."""
    outcome = CheckOutcome(
        domain=HealthDomain.NETWORK,
        sub_checks=[_sub(True), _sub(False, Severity.WARNING), _sub(False, Severity.WARNING)],
    )
    assert outcome.passed is True
    assert len(outcome.warnings) == 2
    assert outcome.errors == []


def test_outcome_fails_on_any_error() -> None:
    outcome = CheckOutcome(
        domain=HealthDomain.DISKS,
        sub_checks=[_sub(True), _sub(False), _sub(True)],
    )
    assert outcome.passed is False
    assert len(outcome.errors) == 1


def test_empty_outcome_passes() -> None:
    assert CheckOutcome(domain=HealthDomain.DISKS).passed is True


def test_verdict_is_and_of_outcomes() -> None:
    good = CheckOutcome(domain=HealthDomain.DISKS, sub_checks=[_sub(True)])
    bad = CheckOutcome(domain=HealthDomain.ENCRYPTION, sub_checks=[_sub(False)])
    assert HealthVerdict(component=HealthDomain.ALL, outcomes=[good, good]).passed is True
    verdict = HealthVerdict(component=HealthDomain.ALL, outcomes=[good, bad])
    assert verdict.passed is False
    assert verdict.error_count == 1
    assert verdict.outcome(HealthDomain.ENCRYPTION) is bad


def test_models_are_frozen() -> None:
    result = _sub(True)
    with pytest.raises(Exception):
        result.passed = False  # type: ignore[misc]


def test_domain_parse_accepts_component_names() -> None:
    assert HealthDomain.parse("zfs") is HealthDomain.STORAGE_POOL
    assert HealthDomain.parse(" LUKS ") is HealthDomain.ENCRYPTION
    assert HealthDomain.ALL.expand() == CONCRETE_DOMAINS
    assert HealthDomain.NETWORK.expand() == (HealthDomain.NETWORK,)


def test_domain_parse_rejects_unknown_name() -> None:
    with pytest.raises(UnknownDomainError) as excinfo:
        HealthDomain.parse("raid")
    assert "raid" in str(excinfo.value)


def test_verdict_dump_includes_derived_fields() -> None:
    outcome = CheckOutcome(domain=HealthDomain.DISKS, sub_checks=[_sub(False)])
    data = HealthVerdict(component=HealthDomain.DISKS, outcomes=[outcome]).model_dump(mode="json")
    assert data["passed"] is False
    assert data["component"] == "disks"
    assert data["outcomes"][0]["passed"] is False
    assert data["outcomes"][0]["sub_checks"][0]["severity"] == "ERROR"
