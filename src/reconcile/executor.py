"""Sequential execution of the decision list against an installer backend.

Decisions run one at a time, in list order. The run state is a small
immutable accumulator folded over the list: a ``halted`` flag set by the
first failure under fail-fast, and the outcomes recorded so far.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import List, Optional, Sequence, Tuple

from backend.base import InstallerBackend, InstallResult
from common.logging_utils import Timer, extra_context, is_debug_enabled
from config.options import EffectiveOptions, PackageFlags
from errors import ExecutionFailedError, InstallerError

from .models import Decision, DecisionKind, Outcome, OutcomeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionReport:
    """Outcomes of one run, one per attempted decision, in order."""

    outcomes: Tuple[Outcome, ...] = ()
    halted: bool = False

    @property
    def failed(self) -> List[str]:
        """Names of the packages whose outcome is a failure."""
        return [outcome.name for outcome in self.outcomes if outcome.failed]

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failures(self) -> None:
        """Raise ``ExecutionFailedError`` naming every failed package."""
        if self.failed:
            raise ExecutionFailedError(self.failed, halted=self.halted)


@dataclass(frozen=True)
class _RunState:
    halted: bool = False
    outcomes: Tuple[Outcome, ...] = field(default=())

    def record(self, outcome: Outcome, halt: bool = False) -> "_RunState":
        return _RunState(halted=self.halted or halt, outcomes=self.outcomes + (outcome,))


def _flags_for(decision: Decision, options: EffectiveOptions) -> Optional[PackageFlags]:
    spec = decision.spec
    return options.for_package(spec) if spec is not None else None


def _fail_fast(flags: Optional[PackageFlags], options: EffectiveOptions) -> bool:
    if flags is not None:
        return not flags.no_fail_fast
    return not options.no_fail_fast


def _invoke(
    decision: Decision,
    flags: Optional[PackageFlags],
    backend: InstallerBackend,
    simulate: bool,
) -> InstallResult:
    if decision.kind is DecisionKind.UNINSTALL:
        return backend.uninstall(decision.name, simulate=simulate)
    return backend.install(
        decision.spec, flags, target=decision.prospective, simulate=simulate
    )


def _attempt(
    decision: Decision,
    flags: Optional[PackageFlags],
    backend: InstallerBackend,
    simulate: bool,
) -> Outcome:
    with Timer() as timer:
        try:
            result = _invoke(decision, flags, backend, simulate)
        except (InstallerError, OSError) as exc:
            logger.error("Failed to run the installer for %r: %s", decision.name, exc)
            return Outcome(decision.name, OutcomeKind.FAILED, reason=str(exc))

    if is_debug_enabled(logger):
        logger.debug(
            "Backend call finished",
            extra=extra_context(
                event="backend_call",
                component="executor",
                action=decision.kind.value,
                package=decision.name,
                outcome="success" if result.success else "failure",
                duration_ms=timer.duration_ms(),
            ),
        )

    if not result.success:
        reason = result.reason or "installer reported a failure"
        logger.error("Failed to %s %r: %s", decision.kind.value, decision.name, reason)
        return Outcome(decision.name, OutcomeKind.FAILED, reason=reason)
    if simulate:
        return Outcome(decision.name, OutcomeKind.SIMULATED, new_version=result.version)
    return Outcome(
        decision.name,
        OutcomeKind.SUCCEEDED,
        new_version=result.version or decision.prospective,
    )


def _step(
    state: _RunState,
    decision: Decision,
    options: EffectiveOptions,
    backend: InstallerBackend,
) -> _RunState:
    if not decision.needs_action:
        return state
    if state.halted:
        return state.record(Outcome(decision.name, OutcomeKind.SKIPPED_DUE_TO_EARLIER_FAILURE))

    flags = _flags_for(decision, options)
    if options.dry_run and not backend.supports_simulation(decision.spec, flags):
        logger.info("Dry run: would %s %r.", decision.kind.value, decision.name)
        return state.record(Outcome(decision.name, OutcomeKind.SIMULATED))

    outcome = _attempt(decision, flags, backend, simulate=options.dry_run)
    halt = outcome.failed and _fail_fast(flags, options)
    if halt:
        logger.error("Stopping at the first failure; use --no-fail-fast to keep going.")
    return state.record(outcome, halt=halt)


def execute(
    decisions: Sequence[Decision],
    options: EffectiveOptions,
    backend: InstallerBackend,
) -> ExecutionReport:
    """Run every decision that needs action and collect its outcome.

    Up-to-date decisions produce no outcome. Under fail-fast, every decision
    after the first failure is recorded as skipped without calling the
    backend. Failures are reported, never raised: use
    ``ExecutionReport.raise_for_failures`` once the report has been shown.
    """
    final = reduce(
        lambda state, decision: _step(state, decision, options, backend),
        decisions,
        _RunState(),
    )
    return ExecutionReport(outcomes=final.outcomes, halted=final.halted)
