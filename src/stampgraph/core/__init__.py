"""Core data model and errors."""

from .exceptions import (
    InvalidIdentifierError,
    NoContentError,
    StampgraphError,
    StampLookupError,
    StampNotFoundError,
)
from .types import (
    AnalysisResult,
    Dependency,
    DependencyGraph,
    DependencyType,
    DetectedPattern,
    GraphEdge,
    GraphFormat,
    GraphNode,
    LoadMethod,
    PatternCategory,
    RiskLevel,
    StampRecord,
)

__all__ = [
    "AnalysisResult",
    "Dependency",
    "DependencyGraph",
    "DependencyType",
    "DetectedPattern",
    "GraphEdge",
    "GraphFormat",
    "GraphNode",
    "InvalidIdentifierError",
    "LoadMethod",
    "NoContentError",
    "PatternCategory",
    "RiskLevel",
    "StampLookupError",
    "StampNotFoundError",
    "StampRecord",
    "StampgraphError",
]
