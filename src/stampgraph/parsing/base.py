"""
Base Parsing Infrastructure.

Defines the extractor protocol used to pull dependency references out of
decoded stamp source, and the registry that runs extractors in priority order.
Extractors only ever pattern-match the source text; nothing is evaluated.
"""

import logging
from dataclasses import dataclass, field
from typing import Generator, List, Protocol, Set, Tuple

from ..core.types import Dependency

logger = logging.getLogger(__name__)


@dataclass
class ExtractionContext:
    """
    Shared context for all extractors processing one stamp's source.

    ``seen`` holds ``(reference, load_method)`` pairs already emitted so a
    reference found by two extractors through the same construct is reported
    once.
    """

    text: str
    seen: Set[Tuple[str, str]] = field(default_factory=set)


class Extractor(Protocol):
    """
    Universal extractor interface.

    Any class implementing this protocol can be registered with an
    ExtractorRegistry.
    """

    @property
    def name(self) -> str:
        """Unique name for debugging."""
        ...

    @property
    def priority(self) -> int:
        """Execution priority. Higher numbers run first."""
        ...

    def can_extract(self, ctx: ExtractionContext) -> bool:
        """Quick check to see if this extractor applies to the source."""
        ...

    def extract(self, ctx: ExtractionContext) -> Generator[Dependency, None, None]:
        """Generator yielding dependencies found in the source."""
        ...


class ExtractorRegistry:
    """
    Manages and orchestrates dependency extractors.
    """

    def __init__(self):
        self._extractors: List[Extractor] = []

    def register(self, extractor: Extractor) -> None:
        """Register a new extractor and sort by priority."""
        self._extractors.append(extractor)
        # Sort descending by priority (100 -> 0)
        self._extractors.sort(key=lambda e: -e.priority)

    @property
    def extractors(self) -> List[Extractor]:
        return list(self._extractors)

    def extract_all(self, ctx: ExtractionContext) -> Generator[Dependency, None, None]:
        """Run all registered extractors against the context."""
        for extractor in self._extractors:
            if not extractor.can_extract(ctx):
                continue
            for dep in extractor.extract(ctx):
                key = (dep.reference, dep.load_method.value)
                if key in ctx.seen:
                    continue
                ctx.seen.add(key)
                yield dep
