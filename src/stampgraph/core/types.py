"""
Core type definitions for stampgraph.

Everything the analysis pipeline produces or consumes is declared here as a
pydantic model so results can be dumped to JSON without extra glue.
"""

import re
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Dict, List, Optional

from typing_extensions import NotRequired, TypedDict

from pydantic import BaseModel, ConfigDict, Field

# References that name another stamp, as opposed to inline compressed data
STAMP_REFERENCE_RE = re.compile(r"^A[0-9]+$")


class DependencyType(StrEnum):
    """What kind of content a dependency pulls in."""
    JAVASCRIPT = "javascript"
    HTML = "html"
    SCRIPT_SRC = "script_src"


class LoadMethod(StrEnum):
    """The source construct used to pull a dependency in."""
    T_JS = "t.js"
    T_HTML = "t.html"
    SCRIPT_TAG = "script_tag"


class PatternCategory(StrEnum):
    RECURSIVE = "recursive"
    FRAMEWORK = "framework"
    LOADING = "loading"
    EXECUTION = "execution"
    ERROR_HANDLING = "error_handling"
    COMPOSITION = "composition"
    OPTIMIZATION = "optimization"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


class GraphFormat(StrEnum):
    """Output formats supported by the graph renderer."""
    TREE = "tree"
    MERMAID = "mermaid"
    GRAPH = "graph"
    JSON = "json"


class StampMetadata(TypedDict, total=False):
    """Snapshot of a stamp's ledger attributes attached to graph nodes."""
    creator: NotRequired[str]
    mimetype: NotRequired[Optional[str]]
    block_index: NotRequired[Optional[int]]
    tx_hash: NotRequired[Optional[str]]
    supply: NotRequired[int]
    locked: NotRequired[bool]


class StampRecord(BaseModel):
    """
    A stamp as returned by the lookup service.

    Field names follow the wire format; ``stamp`` is exposed as ``stamp_id``.
    """
    stamp_id: Optional[int] = Field(default=None, alias="stamp")
    cpid: str
    stamp_base64: Optional[str] = None
    creator: str = ""
    stamp_mimetype: Optional[str] = None
    block_index: Optional[int] = None
    tx_hash: Optional[str] = None
    supply: Optional[int] = None
    locked: Optional[int] = None

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @property
    def has_payload(self) -> bool:
        return bool(self.stamp_base64)

    def snapshot(self) -> StampMetadata:
        return {
            "creator": self.creator,
            "mimetype": self.stamp_mimetype,
            "block_index": self.block_index,
            "tx_hash": self.tx_hash,
            "supply": self.supply or 0,
            "locked": bool(self.locked),
        }


class Dependency(BaseModel):
    """
    A reference from one stamp's source to other content.

    Created unresolved by the extractors; the resolver fills in the
    ``resolved_*`` fields when a lookup succeeds.
    """
    reference: str
    type: DependencyType
    load_method: LoadMethod
    is_resolved: bool = False
    resolved_stamp_id: Optional[int] = None
    resolved_metadata: Optional[StampMetadata] = None

    def is_stamp_reference(self) -> bool:
        """True when the reference names another stamp rather than inline data."""
        return self.type != DependencyType.HTML and bool(
            STAMP_REFERENCE_RE.match(self.reference)
        )

    def mark_resolved(self, record: StampRecord) -> None:
        self.is_resolved = True
        self.resolved_stamp_id = record.stamp_id
        self.resolved_metadata = record.snapshot()


class DetectedPattern(BaseModel):
    name: str
    category: PatternCategory
    confidence: float = Field(ge=0.0, le=1.0)
    description: str
    matches: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CodeStructure(BaseModel):
    has_javascript: bool = False
    has_html: bool = False
    uses_append_framework: bool = False
    is_recursive: bool = False
    has_async_loading: bool = False
    has_error_handling: bool = False


class CodeElements(BaseModel):
    """Names declared in the source, found by regex only."""
    functions: List[str] = Field(default_factory=list)
    variables: List[str] = Field(default_factory=list)
    imports: List[str] = Field(default_factory=list)


class SecurityAnalysis(BaseModel):
    risk_level: RiskLevel = RiskLevel.LOW
    risks: List[str] = Field(default_factory=list)
    has_dangerous_patterns: bool = False
    is_code_safe: bool = True


class PerformanceAnalysis(BaseModel):
    complexity_score: float = Field(default=0.0, ge=0.0, le=10.0)
    dependency_count: int = 0
    max_dependency_depth: int = 0
    estimated_load_time_ms: Optional[float] = None


class GraphNode(BaseModel):
    """A stamp in the dependency graph. Children are owned, tree-shaped."""
    reference: str
    stamp_id: int = 0
    depth: int
    children: List["GraphNode"] = Field(default_factory=list)
    metadata: Optional[StampMetadata] = None
    dependencies: List[Dependency] = Field(default_factory=list)


class GraphEdge(BaseModel):
    source: str
    target: str
    type: str

    model_config = ConfigDict(frozen=True)

    def key(self) -> tuple:
        return (self.source, self.target, self.type)


class DependencyGraph(BaseModel):
    root: GraphNode
    nodes: Dict[str, GraphNode] = Field(default_factory=dict)
    edges: List[GraphEdge] = Field(default_factory=list)
    total_nodes: int = 0
    max_depth_reached: int = 0
    circular_references: List[str] = Field(default_factory=list)
    truncated: bool = False
    warnings: List[str] = Field(default_factory=list)

    def outgoing(self, reference: str) -> List[GraphEdge]:
        return [edge for edge in self.edges if edge.source == reference]

    def child_references(self, reference: str) -> List[str]:
        """
        Distinct edge targets of a node, in edge order.

        A dependency shared by several branches is stored once in the node map
        but collects edges from every branch, so children are read from the
        edge list rather than from the stored node.
        """
        targets: List[str] = []
        for edge in self.outgoing(reference):
            if edge.target not in targets:
                targets.append(edge.target)
        return targets

    def to_dict(self) -> Dict[str, Any]:
        """Canonical structural dump: nodes keyed by reference, children as references."""
        return {
            "root": self.root.reference,
            "nodes": {
                ref: {
                    "reference": node.reference,
                    "stamp_id": node.stamp_id,
                    "depth": node.depth,
                    "children": self.child_references(ref),
                    "metadata": node.metadata,
                    "dependencies": [dep.model_dump(mode="json") for dep in node.dependencies],
                }
                for ref, node in self.nodes.items()
            },
            "edges": [{"from": e.source, "to": e.target, "type": e.type} for e in self.edges],
            "summary": {
                "total_nodes": self.total_nodes,
                "total_edges": len(self.edges),
                "max_depth_reached": self.max_depth_reached,
                "circular_references": list(self.circular_references),
                "truncated": self.truncated,
            },
        }


class StampSummary(BaseModel):
    id: int
    cpid: str
    creator: str
    mimetype: Optional[str] = None
    block_index: Optional[int] = None
    tx_hash: Optional[str] = None

    @classmethod
    def from_record(cls, record: StampRecord) -> "StampSummary":
        return cls(
            id=record.stamp_id or 0,
            cpid=record.cpid,
            creator=record.creator,
            mimetype=record.stamp_mimetype,
            block_index=record.block_index,
            tx_hash=record.tx_hash,
        )


class AnalysisResult(BaseModel):
    stamp: StampSummary
    code_structure: CodeStructure
    code_elements: CodeElements = Field(default_factory=CodeElements)
    dependencies: List[Dependency] = Field(default_factory=list)
    patterns: List[DetectedPattern] = Field(default_factory=list)
    security: SecurityAnalysis
    performance: PerformanceAnalysis
    circular_references: List[str] = Field(default_factory=list)
    raw_content: Optional[str] = None
    decoded_content: Optional[str] = None
    analysis_timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class GraphReport(BaseModel):
    rendered: str
    graph: DependencyGraph
