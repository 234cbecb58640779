"""
Risk & Complexity Analysis.

Heuristic scoring of decoded stamp source. Both analyzers only search the
text; nothing is ever evaluated.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Pattern, Sequence, Tuple

from ..core.types import Dependency, PerformanceAnalysis, RiskLevel, SecurityAnalysis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskRule:
    pattern: Pattern[str]
    risk: str
    level: RiskLevel = RiskLevel.MEDIUM


SECURITY_RULES: Tuple[RiskRule, ...] = (
    RiskRule(re.compile(r"\beval\s*\("), "Code execution via eval()", RiskLevel.HIGH),
    RiskRule(re.compile(r"\bFunction\s*\("), "Dynamic function creation", RiskLevel.HIGH),
    RiskRule(re.compile(r"document\.write\s*\("), "Document write injection"),
    RiskRule(re.compile(r"innerHTML\s*="), "HTML injection via innerHTML"),
    RiskRule(re.compile(r"outerHTML\s*="), "HTML injection via outerHTML"),
    RiskRule(re.compile(r"\blocation\s*=(?!=)"), "Location manipulation"),
    RiskRule(re.compile(r"window\.open\s*\("), "Popup window creation"),
    RiskRule(re.compile(r"XMLHttpRequest|fetch\s*\("), "External network requests"),
)

EXTERNAL_URL_RE = re.compile(r"https?://[^\s\"']+")

AWAIT_RE = re.compile(r"\bawait\b")
DOM_ACCESS_RE = re.compile(r"document\.")
CONTROL_FLOW_RE = re.compile(r"(?:for|while|if|switch)\s*\(")

MAX_COMPLEXITY = 10.0


def _raise_to(current: RiskLevel, level: RiskLevel) -> RiskLevel:
    return level if level.rank > current.rank else current


def analyze_security(
    source: str, rules: Sequence[RiskRule] = SECURITY_RULES
) -> SecurityAnalysis:
    """
    Classify the source against the risky-construct table.

    Dynamic evaluation forces ``high``. Any other hit, or any absolute URL,
    raises the level to at least ``medium``. Levels never go down.
    """
    risks = []
    level = RiskLevel.LOW

    for rule in rules:
        if rule.pattern.search(source):
            risks.append(rule.risk)
            level = _raise_to(level, rule.level)

    urls = EXTERNAL_URL_RE.findall(source)
    if urls:
        risks.append(f"External URLs referenced: {len(urls)}")
        level = _raise_to(level, RiskLevel.MEDIUM)

    has_dangerous = len(risks) > 0
    logger.debug(f"Security analysis: level={level}, risks={len(risks)}")

    return SecurityAnalysis(
        risk_level=level,
        risks=risks,
        has_dangerous_patterns=has_dangerous,
        is_code_safe=level == RiskLevel.LOW and not has_dangerous,
    )


def complexity_score(source: str, dependency_count: int) -> float:
    score = min(len(source) / 1000, 3.0)
    score += min(dependency_count * 0.5, 2.0)
    score += min(len(AWAIT_RE.findall(source)) * 0.3, 2.0)
    score += min(len(DOM_ACCESS_RE.findall(source)) * 0.2, 1.0)
    score += min(len(CONTROL_FLOW_RE.findall(source)) * 0.1, 1.0)
    return min(score, MAX_COMPLEXITY)


def estimate_depth(dependency_count: int) -> int:
    # Proxy only, the real depth comes from the resolved graph
    if dependency_count <= 0:
        return 0
    return math.ceil(math.log2(dependency_count + 1))


def estimate_load_time_ms(source: str, dependency_count: int) -> float:
    return dependency_count * 100 + len(source) * 0.01


def analyze_performance(
    source: str, dependencies: Sequence[Dependency]
) -> PerformanceAnalysis:
    count = len(dependencies)
    result = PerformanceAnalysis(
        complexity_score=complexity_score(source, count),
        dependency_count=count,
        max_dependency_depth=estimate_depth(count),
        estimated_load_time_ms=estimate_load_time_ms(source, count),
    )
    logger.debug(
        f"Performance analysis: complexity={result.complexity_score:.2f}, "
        f"dependencies={count}, est_load={result.estimated_load_time_ms:.1f}ms"
    )
    return result
