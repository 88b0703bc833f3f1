"""Per-resource outcomes and the create-or-patch state machine."""

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from oasync.errors import TransportError
from oasync.remote.result import CallResult, CallStatus

log = logging.getLogger(__name__)


class Outcome(str, Enum):
    CREATED = "created"
    PATCHED = "patched"
    EXISTS = "exists"
    FAILED = "failed"
    EXPORTED = "exported"
    WRITTEN = "written"
    DELETED = "deleted"
    DEPLOYED = "deployed"
    SKIPPED = "skipped"


@dataclass
class ResourceOutcome:
    kind: str
    name: str
    outcome: Outcome
    detail: str = ""


@dataclass
class SyncReport:
    outcomes: list[ResourceOutcome] = field(default_factory=list)

    def record(self, kind: str, name: str, outcome: Outcome, detail: str = "") -> ResourceOutcome:
        entry = ResourceOutcome(kind, name, outcome, detail)
        self.outcomes.append(entry)
        return entry

    @property
    def failed(self) -> list[ResourceOutcome]:
        return [o for o in self.outcomes if o.outcome == Outcome.FAILED]

    def counts(self) -> dict[Outcome, int]:
        return dict(Counter(o.outcome for o in self.outcomes))

    def summary(self) -> str:
        counts = self.counts()
        if not counts:
            return "nothing to do"
        return ", ".join(f"{n} {outcome.value}" for outcome, n in counts.items())


def _failure_detail(result: CallResult) -> str:
    return f"{result.status_text}: {result.body}" if result.body else result.status_text


def reconcile(
    report: SyncReport,
    kind: str,
    name: str,
    create: Callable[[], CallResult],
    patch: Callable[[], CallResult] | None = None,
) -> Outcome:
    """Create a resource, falling back to ``patch`` when it already exists.

    Without a ``patch`` step a conflict leaves the remote resource as it is.
    Failures are recorded on ``report`` and never raised.
    """
    log.info("Creating %s %s...", kind, name)
    try:
        result = create()
    except TransportError as e:
        log.error("  >> Error creating %s %s: %s", kind, name, e)
        return report.record(kind, name, Outcome.FAILED, str(e)).outcome

    if result.status == CallStatus.SUCCESS:
        return report.record(kind, name, Outcome.CREATED).outcome

    if result.status == CallStatus.CONFLICT:
        if patch is None:
            log.info("  %s %s already exists", kind, name)
            return report.record(kind, name, Outcome.EXISTS).outcome
        log.info("Patching %s %s...", kind, name)
        try:
            result = patch()
        except TransportError as e:
            log.error("  >> Error patching %s %s: %s", kind, name, e)
            return report.record(kind, name, Outcome.FAILED, str(e)).outcome
        if result.status == CallStatus.SUCCESS:
            return report.record(kind, name, Outcome.PATCHED).outcome
        log.error("  >> Error patching %s %s: %s", kind, name, result.status_text)
        log.error("%s", result.body)
        return report.record(kind, name, Outcome.FAILED, _failure_detail(result)).outcome

    log.error("  >> Error creating %s %s: %s", kind, name, result.status_text)
    log.error("%s", result.body)
    return report.record(kind, name, Outcome.FAILED, _failure_detail(result)).outcome


def run_call(report: SyncReport, kind: str, name: str, call: Callable[[], CallResult],
             success: Outcome) -> Outcome:
    """Record a single remote call that has no conflict fallback."""
    try:
        result = call()
    except TransportError as e:
        log.error("  >> Error on %s %s: %s", kind, name, e)
        return report.record(kind, name, Outcome.FAILED, str(e)).outcome
    if result.status == CallStatus.SUCCESS:
        return report.record(kind, name, success).outcome
    log.error("  >> Error on %s %s: %s", kind, name, result.status_text)
    return report.record(kind, name, Outcome.FAILED, _failure_detail(result)).outcome
