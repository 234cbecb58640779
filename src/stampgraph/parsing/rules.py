"""
Pattern rule table.

Each rule names a structural idiom found in recursive stamps and the regex
that detects it. The table is an immutable tuple; a PatternMatcher takes it
(or any other sequence of rules) at construction.
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from ..core.types import PatternCategory


@dataclass(frozen=True)
class PatternRule:
    """
    A single detection rule.

    Attributes:
        name: Human-readable rule name.
        pattern: Compiled regex searched against the source.
        confidence: How strongly a hit indicates the idiom (0.0 - 1.0).
        category: Grouping used in reports.
        description: One-line explanation shown next to a hit.
    """

    name: str
    pattern: Pattern[str]
    confidence: float
    category: PatternCategory
    description: str

    def first_match(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        return match.group(0) if match else None


DEFAULT_RULES: Tuple[PatternRule, ...] = (
    PatternRule(
        name="Append Framework",
        pattern=re.compile(r"new\s+Append\(\)"),
        confidence=0.9,
        category=PatternCategory.FRAMEWORK,
        description="Uses the Append framework for recursive loading",
    ),
    PatternRule(
        name="Recursive Stamp Reference",
        pattern=re.compile(r'/s/A[0-9]+|t\.js\(\s*\[\s*["\']A[0-9]+'),
        confidence=0.9,
        category=PatternCategory.RECURSIVE,
        description="References the content of another stamp",
    ),
    PatternRule(
        name="Async Loading Pattern",
        pattern=re.compile(r"await\s+t\.(js|html)\("),
        confidence=0.8,
        category=PatternCategory.LOADING,
        description="Asynchronously loads content from other stamps",
    ),
    PatternRule(
        name="Error Handling Pattern",
        pattern=re.compile(r"try\s*{[\s\S]*?}\s*catch\s*\("),
        confidence=0.7,
        category=PatternCategory.ERROR_HANDLING,
        description="Implements error handling for recursive loading",
    ),
    PatternRule(
        name="Dynamic Script Loading",
        pattern=re.compile(r"document\.createElement\([\"']script[\"']\)"),
        confidence=0.8,
        category=PatternCategory.LOADING,
        description="Dynamically loads JavaScript from other stamps",
    ),
    PatternRule(
        name="Window OnLoad Handler",
        pattern=re.compile(r"window\.onload\s*="),
        confidence=0.6,
        category=PatternCategory.EXECUTION,
        description="Executes code after window loads",
    ),
    PatternRule(
        name="Callback Pattern",
        pattern=re.compile(r"appendCB\s*=\s*async\s*\(\)"),
        confidence=0.7,
        category=PatternCategory.EXECUTION,
        description="Uses callback pattern for async operations",
    ),
    PatternRule(
        name="DOM Manipulation",
        pattern=re.compile(r"document\.(body|head)\.appendChild"),
        confidence=0.6,
        category=PatternCategory.COMPOSITION,
        description="Dynamically manipulates DOM elements",
    ),
    PatternRule(
        name="Animation Frame Loop",
        pattern=re.compile(r"requestAnimationFrame\s*\("),
        confidence=0.6,
        category=PatternCategory.OPTIMIZATION,
        description="Schedules rendering with requestAnimationFrame",
    ),
    PatternRule(
        name="Deferred Loading",
        pattern=re.compile(r"\bdefer\b|loading\s*=\s*[\"']lazy[\"']"),
        confidence=0.5,
        category=PatternCategory.OPTIMIZATION,
        description="Defers or lazy-loads resources",
    ),
)
