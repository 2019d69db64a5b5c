# =============================================================================
# core/diagram.py  —  Mermaid architecture diagram for a GCP project
# =============================================================================
#
# HOW A DIAGRAM IS BUILT:
#
#   assemble(project)                 render(nodes, edges, diagnostics)
#   ─────────────────                 ─────────────────────────────────
#   PROJECT root node                 flowchart LR + comment banner
#   for probe in DEFAULT_PROBES:      one line per node  ID["label"]:::class
#     present → node + edge           one line per edge  A --> B
#     failed  → diagnostics           fixed classDef block
#                                     %% footer for failed probes (if any)
#
#   assemble() does the I/O (probes, awaited one at a time); render() is a
#   pure function, so identical input always gives byte-identical output.
# =============================================================================

from typing import Iterable, Sequence

from core.models import (
    DiagramEdge,
    DiagramLayout,
    DiagramNode,
    NodeClass,
    ProbeOutcome,
    ProbeResult,
    ToolResult,
)
from core.probes import DEFAULT_PROBES, ServiceProbe, run_probe
from core.results import reports_errors

ROOT_ID = "PROJECT"

# Presentation attributes per style class, in declaration order.
CLASS_STYLES: dict[NodeClass, str] = {
    NodeClass.PROJECT: "fill:#1a73e8,color:#fff,stroke:#174ea6,stroke-width:2px",
    NodeClass.COMPUTE: "fill:#e8f0fe,stroke:#1a73e8",
    NodeClass.DATABASE: "fill:#fce8e6,stroke:#d93025",
    NodeClass.STORAGE: "fill:#e8f0fe,stroke:#1967d2",
    NodeClass.NETWORK: "fill:#e6f4ea,stroke:#188038",
    NodeClass.IAM: "fill:#ede7f6,stroke:#673ab7",
    NodeClass.OBSERVABILITY: "fill:#fff3e0,stroke:#ef6c00",
}


def root_node(project_id: str) -> DiagramNode:
    return DiagramNode(ROOT_ID, f"GCP Project<br/>{project_id}", NodeClass.PROJECT)


async def assemble(
    project_id: str, probes: Sequence[ServiceProbe] = DEFAULT_PROBES
) -> DiagramLayout:
    """Run every probe in order and collect the nodes/edges to draw."""
    layout = DiagramLayout(nodes=[root_node(project_id)])

    for probe in probes:
        result = await run_probe(probe, project_id)
        if result.outcome is ProbeOutcome.PRESENT:
            layout.nodes.append(probe.node)
            layout.edges.append(DiagramEdge(ROOT_ID, probe.node.id))
        elif result.outcome is ProbeOutcome.FAILED:
            layout.diagnostics.append(result)

    return layout


# =============================================================================
# Rendering
# =============================================================================
def _escape(label: str) -> str:
    return label.replace('"', "#quot;")


def render_node(node: DiagramNode) -> str:
    return f'{node.id}["{_escape(node.label)}"]:::{node.style_class.value}'


def render_edge(edge: DiagramEdge) -> str:
    if edge.label:
        return f"{edge.source} -->|{_escape(edge.label)}| {edge.target}"
    return f"{edge.source} --> {edge.target}"


def render(
    nodes: Iterable[DiagramNode],
    edges: Iterable[DiagramEdge],
    diagnostics: Iterable[ProbeResult] = (),
) -> str:
    lines = [
        "flowchart LR",
        "%% =========================",
        "%% Google Cloud Architecture",
        "%% =========================",
        "",
        *(render_node(n) for n in nodes),
        "",
        *(render_edge(e) for e in edges),
        "",
        "%% =========================",
        "%% GCP Styles",
        "%% =========================",
        *(f"classDef {cls.value} {style}" for cls, style in CLASS_STYLES.items()),
    ]

    failed = list(diagnostics)
    if failed:
        lines += ["", "%% =========================", "%% Discovery diagnostics", "%% ========================="]
        lines += [f"%% {d.service}: probe failed ({' '.join(d.reason.split())})" for d in failed]

    return "\n".join(lines) + "\n"


@reports_errors("Generating Diagram", "Failed to generate diagram for {project_id}")
async def generate_gcp_mermaid_diagram(
    project_id: str, probes: Sequence[ServiceProbe] = DEFAULT_PROBES
) -> ToolResult:
    layout = await assemble(project_id, probes)
    return ToolResult.ok(render(layout.nodes, layout.edges, layout.diagnostics))
