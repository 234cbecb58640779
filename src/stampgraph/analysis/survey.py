"""
Pattern Survey.

Tallies coding idioms across an explicit collection of stamps: which
frameworks, loading strategies, error handling styles, composition patterns
and optimizations show up, how often, and how complex they are.

The caller supplies the stamps. Nothing here fetches or pages through
listings.
"""

import logging
import math
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Dict, Iterable, List, Literal, Optional, Pattern, Sequence, Tuple

from pydantic import BaseModel, Field

from ..core.types import StampRecord
from ..parsing.decoder import decode_content

logger = logging.getLogger(__name__)

SNIPPET_LEAD = 50
SNIPPET_LENGTH = 200
MAX_EXAMPLES = 5
MAX_RECOMMENDATIONS = 10
MAX_TRENDING = 5
TRENDING_MIN_FREQUENCY = 5.0
RECENT_ADOPTION_RATIO = 0.3


class SurveyFamily(StrEnum):
    ALL = "all"
    FRAMEWORKS = "frameworks"
    LOADING_STRATEGIES = "loading_strategies"
    ERROR_HANDLING = "error_handling"
    COMPOSITION_PATTERNS = "composition_patterns"
    OPTIMIZATION_TECHNIQUES = "optimization_techniques"


class RecommendationType(StrEnum):
    BEGINNER_FRIENDLY = "beginner_friendly"
    ADVANCED = "advanced"
    PERFORMANCE = "performance"
    SECURITY = "security"


def extract_snippet(content: str, keyword: str, max_length: int = SNIPPET_LENGTH) -> str:
    """Text around the first occurrence of keyword, or '' if absent."""
    index = content.find(keyword)
    if index == -1 or not keyword:
        return ""
    start = max(0, index - SNIPPET_LEAD)
    end = min(len(content), index + max_length)
    return content[start:end].strip()


@dataclass(frozen=True)
class SurveyHit:
    snippet: str
    variation_notes: Optional[str] = None


@dataclass(frozen=True)
class SurveyRule:
    """
    One survey idiom.

    A rule fires when every ``all_of`` keyword and at least one ``any_of``
    keyword is present. With ``regex`` set it additionally needs at least
    ``min_count`` regex hits, and the snippet is taken around the first one.
    """

    pattern_id: str
    name: str
    description: str
    family: SurveyFamily
    complexity: int
    keyword: str
    all_of: Tuple[str, ...] = ()
    any_of: Tuple[str, ...] = ()
    regex: Optional[Pattern[str]] = None
    min_count: int = 1

    def detect(self, content: str) -> Optional[SurveyHit]:
        if self.all_of and not all(k in content for k in self.all_of):
            return None
        if self.any_of and not any(k in content for k in self.any_of):
            return None

        if self.regex is None:
            return SurveyHit(snippet=extract_snippet(content, self.keyword))

        found = self.regex.findall(content)
        if len(found) < self.min_count:
            return None
        return SurveyHit(
            snippet=extract_snippet(content, found[0]),
            variation_notes=f"References {len(found)} other stamps",
        )


SURVEY_RULES: Tuple[SurveyRule, ...] = (
    SurveyRule(
        "append_framework", "Append Framework",
        "Uses the Append framework for modular stamp composition",
        SurveyFamily.FRAMEWORKS, 6, "Append", all_of=("Append", "t.js(", "t.html("),
    ),
    SurveyRule(
        "react_framework", "React Framework",
        "Uses React for component-based UI development",
        SurveyFamily.FRAMEWORKS, 8, "React", any_of=("React", "createElement"),
    ),
    SurveyRule(
        "vue_framework", "Vue Framework",
        "Uses Vue.js for reactive UI development",
        SurveyFamily.FRAMEWORKS, 7, "Vue", any_of=("Vue", "createApp"),
    ),
    SurveyRule(
        "dynamic_script_loading", "Dynamic Script Loading",
        "Dynamically loads JavaScript from other stamps",
        SurveyFamily.LOADING_STRATEGIES, 5, "/s/", all_of=("/s/", "script"),
    ),
    SurveyRule(
        "async_loading", "Asynchronous Loading",
        "Uses async/await for non-blocking resource loading",
        SurveyFamily.LOADING_STRATEGIES, 4, "async", all_of=("async", "await"),
    ),
    SurveyRule(
        "promise_based_loading", "Promise-based Loading",
        "Uses Promises for asynchronous resource management",
        SurveyFamily.LOADING_STRATEGIES, 5, "Promise",
        all_of=("Promise",), any_of=(".then(", ".catch("),
    ),
    SurveyRule(
        "try_catch_error_handling", "Try-Catch Error Handling",
        "Uses try-catch blocks for error management",
        SurveyFamily.ERROR_HANDLING, 3, "try", all_of=("try", "catch"),
    ),
    SurveyRule(
        "console_error_logging", "Console Error Logging",
        "Logs errors to console for debugging",
        SurveyFamily.ERROR_HANDLING, 2, "error", any_of=(".error(", "console.error"),
    ),
    SurveyRule(
        "global_error_handling", "Global Error Handling",
        "Implements global error handlers",
        SurveyFamily.ERROR_HANDLING, 4, "onerror",
        any_of=("onerror", "addEventListener('error'"),
    ),
    SurveyRule(
        "multi_stamp_composition", "Multi-Stamp Composition",
        "Composes multiple stamps into a single artwork",
        SurveyFamily.COMPOSITION_PATTERNS, 7, "",
        regex=re.compile(r"A\d{19}"), min_count=2,
    ),
    SurveyRule(
        "dom_manipulation", "DOM Manipulation",
        "Dynamically creates and modifies DOM elements",
        SurveyFamily.COMPOSITION_PATTERNS, 5, "createElement",
        all_of=("createElement", "appendChild"),
    ),
    SurveyRule(
        "content_injection", "Content Injection",
        "Injects content into existing DOM elements",
        SurveyFamily.COMPOSITION_PATTERNS, 3, "innerHTML", any_of=("innerHTML", "textContent"),
    ),
    SurveyRule(
        "animation_frame_optimization", "Animation Frame Optimization",
        "Uses requestAnimationFrame for smooth animations",
        SurveyFamily.OPTIMIZATION_TECHNIQUES, 6, "requestAnimationFrame",
        any_of=("requestAnimationFrame",),
    ),
    SurveyRule(
        "performance_throttling", "Performance Throttling",
        "Uses debouncing or throttling for performance optimization",
        SurveyFamily.OPTIMIZATION_TECHNIQUES, 5, "debounce", any_of=("debounce", "throttle"),
    ),
    SurveyRule(
        "lazy_loading", "Lazy Loading",
        "Implements lazy loading for better performance",
        SurveyFamily.OPTIMIZATION_TECHNIQUES, 4, "lazy", any_of=("lazy", "defer"),
    ),
)


# --- Models ---

class SurveyOptions(BaseModel):
    pattern_types: List[SurveyFamily] = Field(default_factory=lambda: [SurveyFamily.ALL])
    min_occurrences: int = Field(default=3, ge=2, le=100)
    include_examples: bool = True
    sort_by: Literal["frequency", "complexity", "alphabetical"] = "frequency"

    def wants(self, family: SurveyFamily) -> bool:
        return SurveyFamily.ALL in self.pattern_types or family in self.pattern_types


class PatternExample(BaseModel):
    stamp_id: Optional[int] = None
    cpid: str
    code_snippet: str
    variation_notes: Optional[str] = None


class PatternUsage(BaseModel):
    pattern_id: str
    pattern_name: str
    description: str
    category: SurveyFamily
    occurrences: int = 0
    frequency_percentage: float = 0.0
    complexity_score: int
    examples: List[PatternExample] = Field(default_factory=list)


class CategoryStats(BaseModel):
    category: SurveyFamily
    pattern_count: int
    total_occurrences: int
    average_complexity: float


class SurveyStatistics(BaseModel):
    total_patterns_found: int = 0
    most_common_pattern: str = "None"
    average_pattern_complexity: float = 0.0
    patterns_by_category: Dict[str, int] = Field(default_factory=dict)


class Recommendation(BaseModel):
    type: RecommendationType
    pattern_id: str
    reason: str
    difficulty_level: int


class TrendingPattern(BaseModel):
    pattern_id: str
    growth_rate: float
    recent_adoptions: int


class SurveyMetadata(BaseModel):
    total_stamps_analyzed: int
    analysis_date: datetime
    pattern_types_analyzed: List[SurveyFamily]
    min_occurrences_threshold: int
    analysis_duration_ms: float


class SurveyResult(BaseModel):
    analysis_metadata: SurveyMetadata
    discovered_patterns: List[PatternUsage] = Field(default_factory=list)
    pattern_categories: List[CategoryStats] = Field(default_factory=list)
    trending_patterns: List[TrendingPattern] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    statistics: SurveyStatistics = Field(default_factory=SurveyStatistics)


# --- Survey ---

class PatternSurvey:
    """Runs the survey rule table over a collection of stamps."""

    def __init__(self, rules: Sequence[SurveyRule] = SURVEY_RULES):
        self.rules = tuple(rules)

    def detect(self, content: str, options: SurveyOptions) -> List[Tuple[SurveyRule, SurveyHit]]:
        hits = []
        for rule in self.rules:
            if not options.wants(rule.family):
                continue
            hit = rule.detect(content)
            if hit is not None:
                hits.append((rule, hit))
        return hits

    def run(
        self, stamps: Iterable[StampRecord], options: Optional[SurveyOptions] = None
    ) -> SurveyResult:
        options = options or SurveyOptions()
        started = time.perf_counter()
        stamps = list(stamps)
        logger.info(f"Surveying patterns across {len(stamps)} stamps")

        usage: Dict[str, PatternUsage] = {}
        for stamp in stamps:
            if not stamp.has_payload:
                logger.debug(f"Skipping stamp {stamp.stamp_id}: no payload")
                continue
            content = decode_content(stamp.stamp_base64)
            for rule, hit in self.detect(content, options):
                entry = usage.get(rule.pattern_id)
                if entry is None:
                    entry = usage[rule.pattern_id] = PatternUsage(
                        pattern_id=rule.pattern_id,
                        pattern_name=rule.name,
                        description=rule.description,
                        category=rule.family,
                        complexity_score=rule.complexity,
                    )
                entry.occurrences += 1
                entry.examples.append(
                    PatternExample(
                        stamp_id=stamp.stamp_id,
                        cpid=stamp.cpid or f"A{stamp.stamp_id}",
                        code_snippet=hit.snippet,
                        variation_notes=hit.variation_notes,
                    )
                )

        patterns = [p for p in usage.values() if p.occurrences >= options.min_occurrences]
        total = len(stamps)
        for pattern in patterns:
            pattern.frequency_percentage = (pattern.occurrences / total) * 100 if total else 0.0
            pattern.examples = pattern.examples[:MAX_EXAMPLES] if options.include_examples else []

        patterns = sort_patterns(patterns, options.sort_by)

        result = SurveyResult(
            analysis_metadata=SurveyMetadata(
                total_stamps_analyzed=total,
                analysis_date=datetime.now(timezone.utc),
                pattern_types_analyzed=list(options.pattern_types),
                min_occurrences_threshold=options.min_occurrences,
                analysis_duration_ms=(time.perf_counter() - started) * 1000,
            ),
            discovered_patterns=patterns,
            pattern_categories=category_stats(patterns),
            trending_patterns=trending_patterns(patterns),
            recommendations=recommendations(patterns),
            statistics=overall_stats(patterns),
        )
        logger.info(
            f"Pattern survey completed: {len(patterns)} patterns in "
            f"{len(result.pattern_categories)} categories"
        )
        return result


def sort_patterns(patterns: List[PatternUsage], sort_by: str) -> List[PatternUsage]:
    if sort_by == "complexity":
        return sorted(patterns, key=lambda p: -p.complexity_score)
    if sort_by == "alphabetical":
        return sorted(patterns, key=lambda p: p.pattern_name.casefold())
    return sorted(patterns, key=lambda p: -p.occurrences)


def category_stats(patterns: Sequence[PatternUsage]) -> List[CategoryStats]:
    grouped: Dict[SurveyFamily, List[PatternUsage]] = {}
    for pattern in patterns:
        grouped.setdefault(pattern.category, []).append(pattern)

    return [
        CategoryStats(
            category=category,
            pattern_count=len(members),
            total_occurrences=sum(p.occurrences for p in members),
            average_complexity=sum(p.complexity_score for p in members) / len(members),
        )
        for category, members in grouped.items()
    ]


def overall_stats(patterns: Sequence[PatternUsage]) -> SurveyStatistics:
    if not patterns:
        return SurveyStatistics()

    by_category: Dict[str, int] = {}
    for pattern in patterns:
        by_category[pattern.category.value] = by_category.get(pattern.category.value, 0) + 1

    return SurveyStatistics(
        total_patterns_found=len(patterns),
        most_common_pattern=patterns[0].pattern_name,
        average_pattern_complexity=sum(p.complexity_score for p in patterns) / len(patterns),
        patterns_by_category=by_category,
    )


def recommendations(patterns: Sequence[PatternUsage]) -> List[Recommendation]:
    recs: List[Recommendation] = []
    for p in patterns:
        if p.complexity_score <= 3 and p.frequency_percentage > 10:
            recs.append(Recommendation(
                type=RecommendationType.BEGINNER_FRIENDLY,
                pattern_id=p.pattern_id,
                reason=(
                    f"Common pattern with low complexity ({p.complexity_score}/10) "
                    f"used in {p.frequency_percentage:.1f}% of stamps"
                ),
                difficulty_level=p.complexity_score,
            ))
        if p.complexity_score >= 7:
            recs.append(Recommendation(
                type=RecommendationType.ADVANCED,
                pattern_id=p.pattern_id,
                reason=f"High complexity pattern ({p.complexity_score}/10) for experienced developers",
                difficulty_level=p.complexity_score,
            ))
        if p.category == SurveyFamily.OPTIMIZATION_TECHNIQUES:
            recs.append(Recommendation(
                type=RecommendationType.PERFORMANCE,
                pattern_id=p.pattern_id,
                reason="Optimization technique that can improve stamp performance",
                difficulty_level=p.complexity_score,
            ))
        if p.category == SurveyFamily.ERROR_HANDLING:
            recs.append(Recommendation(
                type=RecommendationType.SECURITY,
                pattern_id=p.pattern_id,
                reason="Error handling pattern that improves stamp reliability and security",
                difficulty_level=p.complexity_score,
            ))
    return recs[:MAX_RECOMMENDATIONS]


def trending_patterns(patterns: Sequence[PatternUsage]) -> List[TrendingPattern]:
    # Frequency stands in for growth until timestamps are tracked per stamp
    return [
        TrendingPattern(
            pattern_id=p.pattern_id,
            growth_rate=p.frequency_percentage,
            recent_adoptions=math.floor(p.occurrences * RECENT_ADOPTION_RATIO),
        )
        for p in patterns
        if p.frequency_percentage > TRENDING_MIN_FREQUENCY
    ][:MAX_TRENDING]
