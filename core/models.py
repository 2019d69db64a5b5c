# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the *shape* of everything that flows between the
# cloud SDK, the core operations, and the MCP tool layer.
#
# TWO KINDS OF MODELS LIVE HERE:
#   1. Views (InstanceView, ZoneView, BucketView, ProjectView)
#      Read-only projections of Google Cloud API objects.  Every view is built
#      through ONE classmethod, from_api(), which owns the defaults for fields
#      the API leaves empty.  Handlers never poke at raw SDK objects.
#
#   2. Diagram + result types (DiagramNode, DiagramEdge, ProbeResult,
#      DiagramLayout, ToolResult)
#      Transient, request-scoped values.  Nothing here is persisted.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


# Defaults for fields the API may leave blank.
UNKNOWN_NAME = "unknown"
UNKNOWN_STATUS = "UNKNOWN"


def _last_segment(path: Optional[str], default: str = UNKNOWN_NAME) -> str:
    """Return the trailing segment of a resource path ("zones/us-east1-b" → "us-east1-b")."""
    if not path:
        return default
    return path.rstrip("/").split("/")[-1] or default


# -----------------------------------------------------------------------------
# InstanceView — a Compute Engine VM as surfaced to the user
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class InstanceView:
    """Normalized projection of a compute_v1.Instance."""

    name: str
    zone: str                          # Short zone name, parsed from the zone URL
    status: str                        # RUNNING, TERMINATED, ...
    machine_type: str                  # Short machine type, e.g. "e2-medium"
    networks: list[str] = field(default_factory=list)
    external_ips: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, instance: Any) -> "InstanceView":
        interfaces = list(getattr(instance, "network_interfaces", None) or [])
        networks = [getattr(nic, "network", "") or "" for nic in interfaces]
        external_ips = [
            ip
            for nic in interfaces
            for ac in (getattr(nic, "access_configs", None) or [])
            if (ip := getattr(ac, "nat_i_p", None))
        ]
        return cls(
            name=getattr(instance, "name", None) or UNKNOWN_NAME,
            zone=_last_segment(getattr(instance, "zone", None)),
            status=getattr(instance, "status", None) or UNKNOWN_STATUS,
            machine_type=_last_segment(getattr(instance, "machine_type", None)),
            networks=networks,
            external_ips=external_ips,
        )


@dataclass(frozen=True)
class ZoneView:
    name: str

    @classmethod
    def from_api(cls, zone: Any) -> "ZoneView":
        return cls(name=getattr(zone, "name", None) or "")


@dataclass(frozen=True)
class BucketView:
    name: str
    location: str = ""

    @classmethod
    def from_api(cls, bucket: Any) -> "BucketView":
        return cls(
            name=getattr(bucket, "name", None) or "",
            location=getattr(bucket, "location", None) or "",
        )


@dataclass(frozen=True)
class ProjectView:
    project_id: str

    @classmethod
    def from_api(cls, project: Any) -> "ProjectView":
        # Resource Manager v3 always fills `name` ("projects/123"), but
        # project_id can be blank for projects still being created.
        project_id = getattr(project, "project_id", None) or ""
        if not project_id:
            name = getattr(project, "name", None) or ""
            project_id = name.removeprefix("projects/")
        return cls(project_id=project_id)


# -----------------------------------------------------------------------------
# Diagram types
# -----------------------------------------------------------------------------
class NodeClass(str, Enum):
    """Mermaid style class attached to every diagram node."""

    PROJECT = "project"
    COMPUTE = "compute"
    DATABASE = "database"
    STORAGE = "storage"
    NETWORK = "network"
    IAM = "iam"
    OBSERVABILITY = "observability"


@dataclass(frozen=True)
class DiagramNode:
    id: str                            # Fixed per service type, unique in a diagram
    label: str                         # May contain <br/> line breaks
    style_class: NodeClass


@dataclass(frozen=True)
class DiagramEdge:
    source: str                        # Node id
    target: str                        # Node id
    label: Optional[str] = None


class ProbeOutcome(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass(frozen=True)
class ProbeResult:
    """What a single service probe reported for a project."""

    service: str
    outcome: ProbeOutcome
    reason: str = ""                   # Only set for FAILED


@dataclass
class DiagramLayout:
    """Assembler output: ordered nodes/edges plus any failed probes."""

    nodes: list[DiagramNode] = field(default_factory=list)
    edges: list[DiagramEdge] = field(default_factory=list)
    diagnostics: list[ProbeResult] = field(default_factory=list)


# -----------------------------------------------------------------------------
# ToolResult — what every core operation hands back to the tool layer
# -----------------------------------------------------------------------------
# Created fresh per invocation.  The tool layer turns is_error=True into an
# MCP error result; callers tell success from failure ONLY by this flag.
# -----------------------------------------------------------------------------
@dataclass
class ToolResult:
    text_blocks: list[str] = field(default_factory=list)
    is_error: bool = False

    @property
    def text(self) -> str:
        return "\n\n".join(self.text_blocks)

    @classmethod
    def ok(cls, text: str) -> "ToolResult":
        return cls(text_blocks=[text])

    @classmethod
    def error(cls, text: str) -> "ToolResult":
        return cls(text_blocks=[text], is_error=True)
