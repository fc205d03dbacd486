"""
Configuration for provcheck.

This module centralises the configuration keys understood by the
verification engine and the immutable :class:`TargetConfiguration`
value handed to every checker.  Values come from an optional
installer configuration file written as shell-style ``KEY=VALUE``
lines, overlaid by environment variables of the same names.  The
engine itself never reads the environment; only
:func:`load_target_configuration` does.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Dict, Final, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import MissingConfigurationError

PROJECT_NAME: Final[str] = "provcheck"

# Keys read from the installer configuration.  The order here is the
# order in which ``config-check`` reports them.
CONFIG_KEYS: Final[list[str]] = [
    "TARGET_DISKS",
    "LUKS_DEVICE",
    "LUKS_MAPPED_NAME",
    "ZFS_POOL_NAME",
    "NEW_SYSTEM_MOUNT",
    "NETWORK_INTERFACE",
    "IP_ADDRESS",
    "REACHABILITY_TARGET",
]

# Host pinged by the network checker when REACHABILITY_TARGET is unset.
DEFAULT_REACHABILITY_TARGET: Final[str] = "8.8.8.8"

# Default timeout in seconds for a single probe command.
DEFAULT_COMMAND_TIMEOUT: Final[float] = 120.0


class TargetConfiguration(BaseModel):
    """Per-run targets for every health domain.

    Field aliases match the installer's configuration keys so the model
    can be built directly from a ``KEY=VALUE`` mapping.  Unset keys are
    ``None``; an empty string is treated the same as unset.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    target_disks: Optional[str] = Field(default=None, alias="TARGET_DISKS")
    luks_device: Optional[str] = Field(default=None, alias="LUKS_DEVICE")
    luks_mapped_name: Optional[str] = Field(default=None, alias="LUKS_MAPPED_NAME")
    zfs_pool_name: Optional[str] = Field(default=None, alias="ZFS_POOL_NAME")
    new_system_mount: Optional[str] = Field(default=None, alias="NEW_SYSTEM_MOUNT")
    network_interface: Optional[str] = Field(default=None, alias="NETWORK_INTERFACE")
    ip_address: Optional[str] = Field(default=None, alias="IP_ADDRESS")
    reachability_target: str = Field(
        default=DEFAULT_REACHABILITY_TARGET, alias="REACHABILITY_TARGET"
    )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "TargetConfiguration":
        """Build a configuration from a ``KEY -> value`` mapping.

        Unknown keys are ignored and blank values are dropped so that
        ``LUKS_MAPPED_NAME=""`` behaves like an unset key.
        """
        data = {
            key: value.strip()
            for key, value in values.items()
            if key in CONFIG_KEYS and value is not None and value.strip()
        }
        return cls.model_validate(data)

    def get(self, key: str) -> Optional[str]:
        """Return the value for a configuration key, or ``None`` if unset."""
        if key not in CONFIG_KEYS:
            raise KeyError(key)
        field_name = key.lower()
        return getattr(self, field_name)

    def missing(self, keys: Iterable[str]) -> List[str]:
        """Return the subset of ``keys`` that have no value."""
        return [key for key in keys if not self.get(key)]

    def require(self, keys: Iterable[str]) -> None:
        """Raise :class:`MissingConfigurationError` if any key is unset."""
        missing = self.missing(keys)
        if missing:
            raise MissingConfigurationError(missing)

    @property
    def disks(self) -> List[str]:
        """The comma-separated ``TARGET_DISKS`` value as a list."""
        if not self.target_disks:
            return []
        return [d.strip() for d in self.target_disks.split(",") if d.strip()]


def parse_config_file(path: Path) -> Dict[str, str]:
    """Parse a shell-style ``KEY=VALUE`` configuration file.

    Blank lines and ``#`` comments are skipped, an optional leading
    ``export`` is accepted and values may be quoted.  Lines without an
    ``=`` are ignored.
    """
    values: Dict[str, str] = {}
    with path.open("r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export "):].lstrip()
            key, sep, value = line.partition("=")
            if not sep:
                continue
            try:
                parts = shlex.split(value, comments=True)
            except ValueError:
                # Unbalanced quotes: keep the raw text
                parts = [value]
            values[key.strip()] = " ".join(parts)
    return values


def load_target_configuration(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TargetConfiguration:
    """Load the target configuration for one run.

    Parameters
    ----------
    path : pathlib.Path, optional
        Installer configuration file.  When omitted only the
        environment is consulted.
    environ : mapping, optional
        Environment to overlay on top of the file values.  Defaults to
        ``os.environ``.

    Returns
    -------
    TargetConfiguration
        The frozen configuration value.
    """
    values: Dict[str, str] = {}
    if path is not None:
        values.update(parse_config_file(path))
    env = os.environ if environ is None else environ
    for key in CONFIG_KEYS:
        if env.get(key):
            values[key] = env[key]
    return TargetConfiguration.from_mapping(values)


__all__ = [
    "PROJECT_NAME",
    "CONFIG_KEYS",
    "DEFAULT_REACHABILITY_TARGET",
    "DEFAULT_COMMAND_TIMEOUT",
    "TargetConfiguration",
    "parse_config_file",
    "load_target_configuration",
]
