"""
Unit tests for security and performance scoring.
"""

import pytest

from stampgraph.analysis.risk import (
    analyze_performance,
    analyze_security,
    complexity_score,
    estimate_depth,
    estimate_load_time_ms,
)
from stampgraph.core.types import Dependency, DependencyType, LoadMethod, RiskLevel


def _deps(n: int):
    return [
        Dependency(reference=f"A{i}", type=DependencyType.JAVASCRIPT, load_method=LoadMethod.T_JS)
        for i in range(n)
    ]


class TestSecurity:
    def test_clean_source_is_safe(self):
        result = analyze_security("<script>let x = 1 + 2;</script>")
        assert result.risk_level == RiskLevel.LOW
        assert result.risks == []
        assert result.is_code_safe is True
        assert result.has_dangerous_patterns is False

    @pytest.mark.parametrize("snippet", [
        "eval('1+1')",
        "new Function('return 1')()",
        "<p>harmless</p><script>eval (payload)</script>",
    ])
    def test_dynamic_evaluation_is_always_high(self, snippet):
        result = analyze_security(snippet)
        assert result.risk_level == RiskLevel.HIGH
        assert result.is_code_safe is False

    def test_high_is_not_downgraded_by_later_matches(self):
        result = analyze_security("eval(x); el.innerHTML = y; fetch('/api')")
        assert result.risk_level == RiskLevel.HIGH
        assert "HTML injection via innerHTML" in result.risks
        assert "External network requests" in result.risks

    def test_other_constructs_raise_to_medium(self):
        result = analyze_security("el.innerHTML = '<b>hi</b>'")
        assert result.risk_level == RiskLevel.MEDIUM
        assert result.risks == ["HTML injection via innerHTML"]
        assert result.is_code_safe is False

    def test_external_urls_raise_to_medium(self):
        result = analyze_security('<img src="https://example.com/a.png"><a href="http://x.io">')
        assert result.risk_level == RiskLevel.MEDIUM
        assert result.risks == ["External URLs referenced: 2"]

    def test_word_boundaries(self):
        result = analyze_security("const data = retrieval(x); if (location == 'home') {}")
        assert result.risk_level == RiskLevel.LOW

    def test_location_assignment(self):
        result = analyze_security("window.location = target;")
        assert "Location manipulation" in result.risks


class TestPerformance:
    def test_formula(self):
        source = "await a; await b;"
        score = complexity_score(source, 0)
        assert score == pytest.approx(len(source) / 1000 + 0.6)

    def test_terms_are_capped(self):
        source = ("await document.x; if (a) {} " * 2000)
        # 3 (length) + 2 (deps) + 2 (await) + 1 (dom) + 1 (control flow)
        assert complexity_score(source, 50) == pytest.approx(9.0)

    def test_depth_estimate(self):
        assert estimate_depth(0) == 0
        assert estimate_depth(1) == 1
        assert estimate_depth(3) == 2
        assert estimate_depth(4) == 3

    def test_load_time_estimate(self):
        assert estimate_load_time_ms("x" * 1000, 2) == pytest.approx(210.0)

    def test_analyze_performance(self):
        result = analyze_performance("await t.js([\"A1\"])", _deps(3))
        assert result.dependency_count == 3
        assert result.max_dependency_depth == 2
        assert 0 <= result.complexity_score <= 10
        assert result.estimated_load_time_ms == pytest.approx(300 + len("await t.js([\"A1\"])") * 0.01)
