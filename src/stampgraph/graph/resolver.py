"""
Dependency Resolver.

Builds a bounded, cycle-safe dependency graph for a stamp by decoding its
payload, extracting references and looking each referenced stamp up in turn.

Traversal is sequential and depth-first. Every recursive call gets its own
copy of the ancestor path, so two siblings may both resolve a shared
dependency while a reference that reappears on its own path is recorded as
circular and not followed.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional, Set, Tuple

from ..client.base import StampLookup
from ..core.exceptions import StampLookupError, StampNotFoundError
from ..core.types import Dependency, DependencyGraph, GraphEdge, GraphNode, StampRecord
from ..parsing.decoder import decode_content
from ..parsing.matcher import PatternMatcher

logger = logging.getLogger(__name__)

MIN_DEPTH = 1
MAX_DEPTH = 10


class Deadline:
    """
    A fixed point in time shared by every step of one resolution.

    Checked before each lookup. Once expired, no further lookups are issued.
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self.expires_at = clock() + seconds

    @classmethod
    def from_timeout(cls, seconds: Optional[float]) -> Optional["Deadline"]:
        return cls(seconds) if seconds is not None else None

    def expired(self) -> bool:
        return self._clock() >= self.expires_at


@dataclass
class _Accumulator:
    """Mutable state for a single resolve() call."""

    nodes: Dict[str, GraphNode] = field(default_factory=dict)
    edges: List[GraphEdge] = field(default_factory=list)
    edge_keys: Set[Tuple[str, str, str]] = field(default_factory=set)
    circular: List[str] = field(default_factory=list)
    max_depth_reached: int = 0
    truncated: bool = False

    def add_node(self, node: GraphNode) -> None:
        # A reference reached on several branches keeps its shallowest node
        existing = self.nodes.get(node.reference)
        if existing is None or node.depth < existing.depth:
            self.nodes[node.reference] = node
        self.max_depth_reached = max(self.max_depth_reached, node.depth)

    def add_edge(self, edge: GraphEdge) -> None:
        if edge.key() not in self.edge_keys:
            self.edge_keys.add(edge.key())
            self.edges.append(edge)

    def add_circular(self, reference: str) -> None:
        if reference not in self.circular:
            self.circular.append(reference)


class DependencyResolver:
    """
    Recursive graph builder over a StampLookup.

    A lookup that fails (not found or transport error) leaves the dependency
    unresolved and never aborts the traversal.
    """

    def __init__(self, lookup: StampLookup, matcher: Optional[PatternMatcher] = None):
        self.lookup = lookup
        self.matcher = matcher or PatternMatcher()

    async def resolve(
        self,
        root: StampRecord,
        max_depth: int,
        resolve_all: bool = True,
        include_metadata: bool = True,
        deadline: Optional[Deadline] = None,
    ) -> DependencyGraph:
        if not MIN_DEPTH <= max_depth <= MAX_DEPTH:
            raise ValueError(f"max_depth must be between {MIN_DEPTH} and {MAX_DEPTH}, got {max_depth}")

        logger.debug(f"Resolving dependencies of {root.cpid} (max_depth={max_depth})")
        acc = _Accumulator()
        root_node = await self._build(
            record=root,
            depth=0,
            visited=frozenset(),
            acc=acc,
            max_depth=max_depth,
            resolve_all=resolve_all,
            include_metadata=include_metadata,
            deadline=deadline,
        )

        warnings = []
        if acc.truncated:
            warnings.append("Resolution deadline expired before all dependencies were resolved")

        # Nodes are inserted post-order; present them shallowest first
        nodes = dict(sorted(acc.nodes.items(), key=lambda item: item[1].depth))

        graph = DependencyGraph(
            root=root_node,
            nodes=nodes,
            edges=acc.edges,
            total_nodes=len(acc.nodes),
            max_depth_reached=acc.max_depth_reached,
            circular_references=acc.circular,
            truncated=acc.truncated,
            warnings=warnings,
        )
        logger.info(
            f"Resolved {root.cpid}: {graph.total_nodes} nodes, {len(graph.edges)} edges, "
            f"{len(graph.circular_references)} circular"
        )
        return graph

    def _dependencies_of(self, record: StampRecord) -> List[Dependency]:
        if not record.has_payload:
            logger.debug(f"{record.cpid} has no payload, treating as a leaf")
            return []
        source = decode_content(record.stamp_base64)
        return self.matcher.extract_dependencies(source)

    async def _build(
        self,
        record: StampRecord,
        depth: int,
        visited: FrozenSet[str],
        acc: _Accumulator,
        max_depth: int,
        resolve_all: bool,
        include_metadata: bool,
        deadline: Optional[Deadline],
    ) -> GraphNode:
        reference = record.cpid
        metadata = record.snapshot() if include_metadata else None

        if reference in visited or depth >= max_depth:
            if reference in visited:
                logger.warning(f"Circular reference detected at {reference}")
                acc.add_circular(reference)
            node = GraphNode(
                reference=reference,
                stamp_id=record.stamp_id or 0,
                depth=depth,
                metadata=metadata,
            )
            acc.add_node(node)
            return node

        path = visited | {reference}
        logger.debug(f"Visiting {reference} at depth {depth}")

        dependencies = self._dependencies_of(record)
        children: List[GraphNode] = []

        if resolve_all:
            for dep in dependencies:
                if not dep.is_stamp_reference():
                    continue

                if dep.reference in path:
                    logger.warning(f"Circular dependency detected: {reference} -> {dep.reference}")
                    acc.add_circular(dep.reference)
                    continue

                if deadline is not None and deadline.expired():
                    if not acc.truncated:
                        logger.warning(
                            f"Resolution deadline of {deadline.seconds}s expired at {reference}"
                        )
                    acc.truncated = True
                    break

                child_record = await self._lookup(dep.reference)
                if child_record is None:
                    continue

                dep.mark_resolved(child_record)
                child = await self._build(
                    record=child_record,
                    depth=depth + 1,
                    visited=path,
                    acc=acc,
                    max_depth=max_depth,
                    resolve_all=resolve_all,
                    include_metadata=include_metadata,
                    deadline=deadline,
                )
                children.append(child)
                acc.add_edge(
                    GraphEdge(source=reference, target=child.reference, type=dep.load_method.value)
                )

        node = GraphNode(
            reference=reference,
            stamp_id=record.stamp_id or 0,
            depth=depth,
            children=children,
            metadata=metadata,
            dependencies=dependencies,
        )
        acc.add_node(node)
        return node

    async def _lookup(self, reference: str) -> Optional[StampRecord]:
        """Find a referenced stamp, returning None on any lookup failure."""
        try:
            record = await self.lookup.lookup_by_identifier(reference)
            if record is None:
                logger.info(f"Dependency {reference} not found")
                return None
            if not record.has_payload and record.stamp_id is not None:
                record = await self.lookup.get_by_id(record.stamp_id)
            return record
        except StampNotFoundError:
            logger.info(f"Dependency {reference} not found")
        except StampLookupError as e:
            logger.warning(f"Failed to resolve dependency {reference}: {e}")
        return None
