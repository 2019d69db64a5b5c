# =============================================================================
# core/probes.py  —  Service probes ("is this service in use in the project?")
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Each probe is a read-only existence check for ONE service type.  The
#   diagram assembler runs them in a fixed order and draws a node for every
#   service that answers "present".
#
#   ┌────────────┬───────────────────────────────────────────────────────┐
#   │ compute    │ zones.list, then instances.list per zone (max 1 item),│
#   │            │ stopping at the first zone that has an instance       │
#   │ database   │ Spanner instances.list, present if any                │
#   │ iam        │ AlwaysPresent                                         │
#   │ logging    │ AlwaysPresent                                         │
#   │ monitoring │ AlwaysPresent                                         │
#   └────────────┴───────────────────────────────────────────────────────┘
#
# ALWAYS-PRESENT SERVICES:
#   IAM, Cloud Logging and Cloud Monitoring exist in every project, so their
#   probes are the explicit AlwaysPresent policy instead of an API call.  A
#   real check can replace one without touching the assembler.
#
# FAILURES:
#   run_probe() never raises.  An exception becomes ProbeOutcome.FAILED with
#   the message as reason; the assembler draws the service as absent and the
#   renderer lists the reason in a diagnostics footer.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from core import clients
from core.compute import list_zone_instances, list_zones
from core.models import DiagramNode, NodeClass, ProbeOutcome, ProbeResult
from core.results import error_message

logger = logging.getLogger(__name__)

ProbeCheck = Callable[[str], Awaitable[bool]]


@dataclass(frozen=True)
class ServiceProbe:
    service: str
    node: DiagramNode                  # Drawn when the check answers True
    check: ProbeCheck


class AlwaysPresent:
    """Probe policy for services assumed enabled in every project."""

    def __init__(self, service: str):
        self.service = service

    async def __call__(self, project_id: str) -> bool:
        return True

    def __repr__(self) -> str:
        return f"AlwaysPresent({self.service!r})"


async def compute_in_use(project_id: str) -> bool:
    for zone in await list_zones(project_id):
        if await list_zone_instances(project_id, zone.name, page_size=1):
            return True
    return False


async def spanner_in_use(project_id: str) -> bool:
    client = await clients.run_blocking(clients.spanner_client, project_id)
    first = await clients.run_blocking(lambda: next(iter(client.list_instances()), None))
    return first is not None


COMPUTE_PROBE = ServiceProbe(
    "compute", DiagramNode("COMPUTE", "Compute Engine", NodeClass.COMPUTE), compute_in_use
)
DATABASE_PROBE = ServiceProbe(
    "database", DiagramNode("SPANNER", "Cloud Spanner", NodeClass.DATABASE), spanner_in_use
)
IAM_PROBE = ServiceProbe(
    "iam", DiagramNode("IAM", "IAM", NodeClass.IAM), AlwaysPresent("iam")
)
LOGGING_PROBE = ServiceProbe(
    "logging",
    DiagramNode("LOGGING", "Cloud Logging", NodeClass.OBSERVABILITY),
    AlwaysPresent("logging"),
)
MONITORING_PROBE = ServiceProbe(
    "monitoring",
    DiagramNode("MONITORING", "Cloud Monitoring", NodeClass.OBSERVABILITY),
    AlwaysPresent("monitoring"),
)

# Order fixes node/edge order in the rendered diagram.
DEFAULT_PROBES: tuple[ServiceProbe, ...] = (
    COMPUTE_PROBE,
    DATABASE_PROBE,
    IAM_PROBE,
    LOGGING_PROBE,
    MONITORING_PROBE,
)


async def run_probe(probe: ServiceProbe, project_id: str) -> ProbeResult:
    try:
        present = await probe.check(project_id)
    except Exception as e:
        reason = error_message(e)
        logger.warning("Probe %s failed for %s: %s", probe.service, project_id, reason)
        return ProbeResult(probe.service, ProbeOutcome.FAILED, reason)
    outcome = ProbeOutcome.PRESENT if present else ProbeOutcome.ABSENT
    return ProbeResult(probe.service, outcome)
