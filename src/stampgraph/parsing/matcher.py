"""
Pattern Matcher for decoded stamp source.

Runs the registered dependency extractors, evaluates every rule in the rule
table and derives the structure flags reported for a stamp. The source is
treated purely as text: it is searched, never executed.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..core.types import CodeElements, CodeStructure, Dependency, DetectedPattern
from .base import ExtractionContext, ExtractorRegistry
from .extractors import LoaderCallExtractor, ScriptSrcExtractor, SetAttributeExtractor
from .rules import DEFAULT_RULES, PatternRule

logger = logging.getLogger(__name__)

FUNCTION_DECL_RE = re.compile(r"function\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*\(")
ARROW_FUNCTION_RE = re.compile(r"([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*(?:async\s+)?\([^)]*\)\s*=>")
VARIABLE_DECL_RE = re.compile(r"(?:let|const|var)\s+([a-zA-Z_$][a-zA-Z0-9_$]*)")
IMPORT_RE = re.compile(r"import\s+.*?\s+from\s+[\"']([^\"']+)[\"']")

TRY_RE = re.compile(r"\btry\b")
CATCH_RE = re.compile(r"\bcatch\b")


@dataclass
class MatchResult:
    """Everything the matcher found in one stamp's source."""

    dependencies: List[Dependency] = field(default_factory=list)
    patterns: List[DetectedPattern] = field(default_factory=list)
    structure: CodeStructure = field(default_factory=CodeStructure)
    elements: CodeElements = field(default_factory=CodeElements)


def create_default_registry() -> ExtractorRegistry:
    registry = ExtractorRegistry()
    registry.register(LoaderCallExtractor())
    registry.register(ScriptSrcExtractor())
    registry.register(SetAttributeExtractor())
    return registry


class PatternMatcher:
    """
    Rule-driven classifier over decoded stamp source.

    Deterministic for identical input and free of side effects apart from
    logging.
    """

    def __init__(
        self,
        rules: Sequence[PatternRule] = DEFAULT_RULES,
        registry: Optional[ExtractorRegistry] = None,
    ):
        self.rules = tuple(rules)
        self.registry = registry or create_default_registry()

    def match(self, source: str) -> MatchResult:
        logger.debug(f"Matching source ({len(source)} chars)")
        dependencies = self.extract_dependencies(source)
        patterns = self.detect_patterns(source)
        result = MatchResult(
            dependencies=dependencies,
            patterns=patterns,
            structure=self.analyze_structure(source, dependencies, patterns),
            elements=self.extract_elements(source),
        )
        logger.debug(
            f"Matched {len(result.dependencies)} dependencies, {len(result.patterns)} patterns"
        )
        return result

    def extract_dependencies(self, source: str) -> List[Dependency]:
        ctx = ExtractionContext(text=source)
        return list(self.registry.extract_all(ctx))

    def detect_patterns(self, source: str) -> List[DetectedPattern]:
        detected = []
        for rule in self.rules:
            hit = rule.first_match(source)
            if hit is None:
                continue
            logger.debug(f"Detected pattern '{rule.name}' ({rule.confidence})")
            detected.append(
                DetectedPattern(
                    name=rule.name,
                    category=rule.category,
                    confidence=rule.confidence,
                    description=rule.description,
                    matches=[hit],
                )
            )
        return detected

    @staticmethod
    def analyze_structure(
        source: str,
        dependencies: Sequence[Dependency],
        patterns: Sequence[DetectedPattern],
    ) -> CodeStructure:
        lowered = source.lower()
        has_loader = "t.js" in source or "t.html" in source
        return CodeStructure(
            has_javascript="<script" in lowered or "javascript:" in lowered,
            has_html="<html" in lowered or "<!doctype" in lowered,
            uses_append_framework=(
                any(p.name == "Append Framework" for p in patterns) or "appendCB" in source
            ),
            is_recursive=len(dependencies) > 0,
            has_async_loading="await" in source and has_loader,
            has_error_handling=bool(TRY_RE.search(source) and CATCH_RE.search(source)),
        )

    @staticmethod
    def extract_elements(source: str) -> CodeElements:
        functions = FUNCTION_DECL_RE.findall(source) + ARROW_FUNCTION_RE.findall(source)
        return CodeElements(
            functions=functions,
            variables=VARIABLE_DECL_RE.findall(source),
            imports=IMPORT_RE.findall(source),
        )
