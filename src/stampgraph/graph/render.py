"""
Graph Renderer.

Pure formatting over a finished DependencyGraph. Every format carries the
circular-reference and truncation warnings so they are never lost.
"""

import json
import re
from typing import Callable, Dict, List

from ..core.types import DependencyGraph, GraphFormat, GraphNode

MERMAID_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9]")
MERMAID_LABEL_LENGTH = 8
CREATOR_PREVIEW_LENGTH = 20


def sanitize_mermaid_id(reference: str) -> str:
    return MERMAID_UNSAFE_RE.sub("_", reference)


def _warning_lines(graph: DependencyGraph) -> List[str]:
    lines = [f"Circular reference: {ref}" for ref in graph.circular_references]
    lines.extend(graph.warnings)
    return lines


def render_tree(graph: DependencyGraph) -> str:
    lines = [
        "🌳 Stamp Dependency Tree",
        "========================",
        "",
        "📊 Tree Summary:",
        f"   Total Nodes: {graph.total_nodes}",
        f"   Max Depth: {graph.max_depth_reached}",
        f"   Edges: {len(graph.edges)}",
    ]
    if graph.circular_references:
        lines.append(f"   ⚠️ Circular References: {len(graph.circular_references)}")
    lines.append("")

    lines.append("🏗️ Dependency Structure:")
    _render_tree_node(graph.root, lines, prefix="", is_last=True)

    if graph.circular_references:
        lines.append("")
        lines.append("⚠️ Circular References Detected:")
        lines.extend(f"   - {ref}" for ref in graph.circular_references)
    if graph.warnings:
        lines.append("")
        lines.extend(f"⚠️ {warning}" for warning in graph.warnings)

    return "\n".join(lines)


def _render_tree_node(node: GraphNode, lines: List[str], prefix: str, is_last: bool) -> None:
    connector = "└── " if is_last else "├── "
    meta = node.metadata
    if meta:
        creator = (meta.get("creator") or "")[:CREATOR_PREVIEW_LENGTH]
        info = f" (ID: {node.stamp_id}, Creator: {creator}...)"
    else:
        info = f" (ID: {node.stamp_id})"
    lines.append(f"{prefix}{connector}📄 {node.reference}{info}")

    child_prefix = prefix + ("    " if is_last else "│   ")
    if meta:
        lines.append(f"{child_prefix}├─ Type: {meta.get('mimetype')}")
        lines.append(f"{child_prefix}├─ Block: {meta.get('block_index')}")
        lines.append(f"{child_prefix}└─ Supply: {meta.get('supply')}")

    for index, child in enumerate(node.children):
        _render_tree_node(child, lines, child_prefix, index == len(node.children) - 1)


def render_mermaid(graph: DependencyGraph) -> str:
    lines = ["```mermaid", "graph TD", ""]

    for reference, node in graph.nodes.items():
        label = f"{reference[:MERMAID_LABEL_LENGTH]}...<br/>ID: {node.stamp_id}"
        lines.append(f'    {sanitize_mermaid_id(reference)}["{label}"]')

    lines.append("")
    for edge in graph.edges:
        lines.append(
            f"    {sanitize_mermaid_id(edge.source)} -->|{edge.type}| {sanitize_mermaid_id(edge.target)}"
        )

    if graph.circular_references:
        lines.append("")
        lines.append("    %% Circular references detected:")
        lines.extend(f"    %% - {ref}" for ref in graph.circular_references)
    for warning in graph.warnings:
        lines.append(f"    %% {warning}")

    lines.append("```")
    lines.append("")
    lines.append(
        f"**Graph Statistics:** {graph.total_nodes} nodes, {len(graph.edges)} edges, "
        f"max depth {graph.max_depth_reached}"
    )
    return "\n".join(lines)


def render_adjacency(graph: DependencyGraph) -> str:
    lines = [
        "📊 Dependency Graph (Adjacency List)",
        "====================================",
        "",
    ]
    for reference, node in graph.nodes.items():
        lines.append(f"🔗 {reference} (ID: {node.stamp_id}, Depth: {node.depth})")
        outgoing = graph.outgoing(reference)
        if outgoing:
            lines.extend(f"   └─ {edge.type} → {edge.target}" for edge in outgoing)
        else:
            lines.append("   └─ (no dependencies)")
        lines.append("")

    warnings = _warning_lines(graph)
    if warnings:
        lines.append("⚠️ Warnings:")
        lines.extend(f"   - {warning}" for warning in warnings)
    return "\n".join(lines)


def render_json(graph: DependencyGraph) -> str:
    data = graph.to_dict()
    data["warnings"] = _warning_lines(graph)
    return json.dumps(data, indent=2, default=str)


RENDERERS: Dict[GraphFormat, Callable[[DependencyGraph], str]] = {
    GraphFormat.TREE: render_tree,
    GraphFormat.MERMAID: render_mermaid,
    GraphFormat.GRAPH: render_adjacency,
    GraphFormat.JSON: render_json,
}


def render(graph: DependencyGraph, format: GraphFormat = GraphFormat.TREE) -> str:
    """Render a dependency graph in one of the supported textual formats."""
    return RENDERERS[GraphFormat(format)](graph)
