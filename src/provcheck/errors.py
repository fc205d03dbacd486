"""Exception hierarchy for provcheck.

Only configuration problems are raised as exceptions.  Subsystem
failures found while probing are recorded as sub-check results and
never propagate past a checker.
"""

from __future__ import annotations

from typing import Iterable, List


class ProvcheckError(Exception):
    """Base class for all provcheck errors."""


class UnknownDomainError(ProvcheckError, ValueError):
    """Raised when a requested health component is not recognised."""

    def __init__(self, name: str, choices: Iterable[str]) -> None:
        self.name = name
        self.choices: List[str] = list(choices)
        super().__init__(
            f"Unknown component: {name!r} (expected one of {', '.join(self.choices)})"
        )


class MissingConfigurationError(ProvcheckError, KeyError):
    """Raised when configuration keys required by a component are unset."""

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys: List[str] = sorted(set(keys))
        super().__init__(f"Missing configuration keys: {', '.join(self.keys)}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead
        return self.args[0]


__all__ = ["ProvcheckError", "UnknownDomainError", "MissingConfigurationError"]
