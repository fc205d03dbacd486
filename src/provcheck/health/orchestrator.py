"""Dispatch of health components to domain checkers.

:class:`Orchestrator` resolves a component name to its checkers, makes
sure the configuration they need is present, runs them in a fixed
order and folds their outcomes into a :class:`HealthVerdict`.  It
applies the escalation policy by flagging the verdict as aborted; it
never exits the process itself.  :func:`health_check` is the
convenience entry point used by the CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..config import TargetConfiguration
from ..errors import MissingConfigurationError
from ..notify import NotificationSink
from ..probes.mounts import DEFAULT_MOUNT_PARENT
from ..probes.network import SYS_CLASS_NET
from ..probes.packages import ToolEnsurer
from ..probes.runner import CommandRunner, run_command
from .base import DomainChecker
from .disks import DiskChecker
from .encryption import EncryptionChecker
from .models import CheckOutcome, HealthDomain, HealthVerdict
from .network import NetworkChecker
from .pool import PoolChecker
from .system import SystemChecker

CheckerFactory = Callable[[], DomainChecker]


class Orchestrator:
    """Run health checks for one configuration.

    Parameters
    ----------
    config : TargetConfiguration
        Targets for every domain.
    sink : NotificationSink
        Receives every check event and the scrub confirmation.
    runner : CommandRunner, optional
        Spawns every external command; defaults to :func:`run_command`.
    ensurer : ToolEnsurer, optional
        Installs ``smartctl`` on demand.  Defaults to an apt-based
        ensurer sharing ``runner``.
    mount_parent : pathlib.Path
        Where the pool checker creates its temporary mount point.
    sys_class_net : pathlib.Path
        Location of the kernel's network interface directory.
    """

    def __init__(
        self,
        config: TargetConfiguration,
        sink: NotificationSink,
        runner: CommandRunner = run_command,
        ensurer: Optional[ToolEnsurer] = None,
        mount_parent: Path = DEFAULT_MOUNT_PARENT,
        sys_class_net: Path = SYS_CLASS_NET,
    ) -> None:
        self.config = config
        self.sink = sink
        self.runner = runner
        self.factories: Dict[HealthDomain, CheckerFactory] = {
            HealthDomain.DISKS: lambda: DiskChecker(config, sink, runner, ensurer=ensurer),
            HealthDomain.ENCRYPTION: lambda: EncryptionChecker(config, sink, runner),
            HealthDomain.STORAGE_POOL: lambda: PoolChecker(
                config, sink, runner, mount_parent=mount_parent
            ),
            HealthDomain.INSTALLED_SYSTEM: lambda: SystemChecker(config, sink, runner),
            HealthDomain.NETWORK: lambda: NetworkChecker(
                config, sink, runner, sys_class_net=sys_class_net
            ),
        }

    def checkers_for(self, domain: HealthDomain) -> List[DomainChecker]:
        """Instantiate the checkers covering ``domain`` in run order."""
        return [self.factories[d]() for d in domain.expand()]

    def missing_configuration(self, domain: Union[HealthDomain, str]) -> List[str]:
        """Return required configuration keys left unset for ``domain``."""
        if not isinstance(domain, HealthDomain):
            domain = HealthDomain.parse(domain)
        missing: List[str] = []
        for checker in self.checkers_for(domain):
            keys = checker.required_keys
            if domain is not HealthDomain.ALL:
                keys = keys + checker.standalone_keys
            for key in self.config.missing(keys):
                if key not in missing:
                    missing.append(key)
        return missing

    def run(self, domain: Union[HealthDomain, str], abort_on_failure: bool = True) -> HealthVerdict:
        """Run the checks for ``domain`` and apply the escalation policy.

        Raises
        ------
        UnknownDomainError
            If ``domain`` is not a known component name.  No checker runs.
        MissingConfigurationError
            If a key required by any requested checker is unset.  No
            checker runs.
        """
        if not isinstance(domain, HealthDomain):
            domain = HealthDomain.parse(domain)
        missing = self.missing_configuration(domain)
        if missing:
            raise MissingConfigurationError(missing)
        checkers = self.checkers_for(domain)

        self.sink.info(f"Running health check for: {domain.value}")
        # Every checker runs, even after an earlier domain failed
        outcomes: List[CheckOutcome] = [checker.run() for checker in checkers]
        verdict = HealthVerdict(component=domain, outcomes=outcomes)

        if verdict.passed:
            self.sink.success(f"Health check for {domain.value} passed")
            return verdict
        if abort_on_failure:
            self.sink.error(f"Health check for {domain.value} failed. Aborting installation.")
            return verdict.model_copy(update={"aborted": True})
        self.sink.warning(
            f"Health check for {domain.value} failed ({verdict.error_count} errors); continuing"
        )
        return verdict


def health_check(
    component: Union[HealthDomain, str],
    exit_on_error: bool = True,
    *,
    config: TargetConfiguration,
    sink: NotificationSink,
    runner: CommandRunner = run_command,
    **options,
) -> HealthVerdict:
    """Run the health check for ``component``.

    This is the single entry point of the engine.  With
    ``exit_on_error`` a failing run comes back with ``aborted=True``;
    terminating the process is left to the caller.  Extra keyword
    options are passed through to :class:`Orchestrator`.
    """
    orchestrator = Orchestrator(config, sink, runner=runner, **options)
    return orchestrator.run(component, abort_on_failure=exit_on_error)
