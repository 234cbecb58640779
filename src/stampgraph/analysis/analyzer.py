"""
Stamp Analyzer.

Caller-facing orchestration: resolves an identifier to a stamp, decodes its
payload, runs the matcher and the risk/complexity scorers, and builds the
dependency graph through the resolver.
"""

import logging
import re
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from ..client.base import StampLookup
from ..core.exceptions import InvalidIdentifierError, NoContentError, StampNotFoundError
from ..core.types import (
    AnalysisResult,
    Dependency,
    DependencyGraph,
    DependencyType,
    GraphFormat,
    GraphReport,
    PerformanceAnalysis,
    SecurityAnalysis,
    StampRecord,
    StampSummary,
)
from ..graph.render import render
from ..graph.resolver import Deadline, DependencyResolver
from ..parsing.decoder import decode_content
from ..parsing.matcher import PatternMatcher
from .risk import analyze_performance, analyze_security

logger = logging.getLogger(__name__)

NUMERIC_ID_RE = re.compile(r"^[0-9]+$")
CPID_RE = re.compile(r"^[A-Za-z0-9]+$")


class AnalyzeOptions(BaseModel):
    include_dependencies: bool = True
    max_depth: int = Field(default=3, ge=1, le=10)
    include_raw_content: bool = False
    include_security_analysis: bool = True
    include_performance_analysis: bool = True


class DependencyGraphOptions(BaseModel):
    max_depth: int = Field(default=3, ge=1, le=10)
    include_metadata: bool = True
    format: GraphFormat = GraphFormat.TREE
    resolve_all: bool = True


def parse_identifier(identifier: str) -> Tuple[str, object]:
    """
    Classify a caller-supplied identifier.

    Returns:
        ("id", int) for a numeric stamp id or ("cpid", str) for a reference.

    Raises:
        InvalidIdentifierError: If it is neither.
    """
    value = str(identifier).strip()
    if NUMERIC_ID_RE.match(value):
        return "id", int(value)
    if CPID_RE.match(value):
        return "cpid", value
    raise InvalidIdentifierError(str(identifier))


class StampAnalyzer:
    """
    Runs analyses and dependency graph builds against a StampLookup.

    Each call builds its own resolver state; nothing is shared between calls.
    """

    def __init__(
        self,
        lookup: StampLookup,
        matcher: Optional[PatternMatcher] = None,
        resolution_timeout: Optional[float] = None,
    ):
        self.lookup = lookup
        self.matcher = matcher or PatternMatcher()
        self.resolution_timeout = resolution_timeout

    async def resolve_stamp(self, identifier: str) -> StampRecord:
        kind, value = parse_identifier(identifier)
        if kind == "id":
            return await self.lookup.get_by_id(value)

        record = await self.lookup.lookup_by_identifier(value)
        if record is None:
            raise StampNotFoundError(value)
        # Search results may omit the payload; fetch the full record
        if not record.has_payload and record.stamp_id is not None:
            record = await self.lookup.get_by_id(record.stamp_id)
        return record

    def _resolver(self) -> DependencyResolver:
        return DependencyResolver(self.lookup, self.matcher)

    def _deadline(self) -> Optional[Deadline]:
        return Deadline.from_timeout(self.resolution_timeout)

    async def analyze_stamp_code(
        self, identifier: str, options: Optional[AnalyzeOptions] = None
    ) -> AnalysisResult:
        options = options or AnalyzeOptions()
        record = await self.resolve_stamp(identifier)
        if not record.has_payload:
            raise NoContentError(str(identifier))

        source = decode_content(record.stamp_base64)
        logger.debug(f"Decoded stamp {record.stamp_id}: {len(source)} chars")
        match = self.matcher.match(source)

        dependencies: List[Dependency] = match.dependencies
        circular: List[str] = []
        if options.include_dependencies:
            graph = await self._resolver().resolve(
                record,
                max_depth=options.max_depth,
                deadline=self._deadline(),
            )
            dependencies = graph.root.dependencies
            circular = graph.circular_references

        if options.include_security_analysis:
            security = analyze_security(source)
        else:
            security = SecurityAnalysis()

        if options.include_performance_analysis:
            performance = analyze_performance(source, dependencies)
        else:
            performance = PerformanceAnalysis(dependency_count=len(dependencies))

        result = AnalysisResult(
            stamp=StampSummary.from_record(record),
            code_structure=match.structure,
            code_elements=match.elements,
            dependencies=dependencies,
            patterns=match.patterns,
            security=security,
            performance=performance,
            circular_references=circular,
            raw_content=source if options.include_raw_content else None,
            decoded_content=self._decode_markup(dependencies),
        )
        logger.info(
            f"Stamp analysis completed: stamp={record.stamp_id}, "
            f"dependencies={len(dependencies)}, patterns={len(match.patterns)}, "
            f"recursive={match.structure.is_recursive}"
        )
        return result

    @staticmethod
    def _decode_markup(dependencies: List[Dependency]) -> Optional[str]:
        """Decode the first inline markup payload, if any."""
        for dep in dependencies:
            if dep.type == DependencyType.HTML and dep.reference:
                return decode_content(dep.reference)
        return None

    async def build_dependency_graph(
        self, identifier: str, options: Optional[DependencyGraphOptions] = None
    ) -> GraphReport:
        options = options or DependencyGraphOptions()
        record = await self.resolve_stamp(identifier)
        if not record.has_payload:
            raise NoContentError(str(identifier))

        graph: DependencyGraph = await self._resolver().resolve(
            record,
            max_depth=options.max_depth,
            resolve_all=options.resolve_all,
            include_metadata=options.include_metadata,
            deadline=self._deadline(),
        )
        return GraphReport(rendered=render(graph, options.format), graph=graph)
