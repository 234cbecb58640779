"""
Unit tests for the StampAnalyzer orchestration.
"""

import pytest
from pydantic import ValidationError

from stampgraph.analysis.analyzer import (
    AnalyzeOptions,
    DependencyGraphOptions,
    StampAnalyzer,
    parse_identifier,
)
from stampgraph.core.exceptions import InvalidIdentifierError, NoContentError, StampNotFoundError
from stampgraph.core.types import GraphFormat, RiskLevel

RECURSIVE_SOURCE = """<html><script>
const t = new Append();
t.appendCB = async () => {
  await t.js(["A200", "A999"]);
  await t.html(["{html}"]);
};
</script></html>"""


@pytest.fixture
def stamps(make_stamp, encode):
    markup = encode("<div id='art'>hello</div>", compress=True)
    root = make_stamp(100, "A100", RECURSIVE_SOURCE.replace("{html}", markup))
    child = make_stamp(200, "A200", 'await t.js(["A100"]);')
    return root, child


class TestParseIdentifier:
    def test_numeric(self):
        assert parse_identifier("12345") == ("id", 12345)

    def test_cpid(self):
        assert parse_identifier("A12345678901234567890") == ("cpid", "A12345678901234567890")

    @pytest.mark.parametrize("bad", ["", "A-1", "A 1", "<script>"])
    def test_invalid(self, bad):
        with pytest.raises(InvalidIdentifierError):
            parse_identifier(bad)


class TestAnalyzeStampCode:
    @pytest.mark.asyncio
    async def test_full_analysis(self, stamps, make_lookup):
        lookup = make_lookup(*stamps)
        analyzer = StampAnalyzer(lookup)

        result = await analyzer.analyze_stamp_code("100")

        assert result.stamp.id == 100
        assert result.stamp.cpid == "A100"
        assert result.code_structure.is_recursive is True
        assert result.code_structure.uses_append_framework is True

        deps = {d.reference: d for d in result.dependencies if d.is_stamp_reference()}
        assert deps["A200"].is_resolved is True
        assert deps["A200"].resolved_stamp_id == 200
        assert deps["A999"].is_resolved is False
        assert result.circular_references == ["A100"]

        assert result.decoded_content == "<div id='art'>hello</div>"
        assert result.raw_content is None
        assert any(p.name == "Append Framework" for p in result.patterns)
        assert result.security.risk_level == RiskLevel.LOW
        assert result.performance.dependency_count == 3

    @pytest.mark.asyncio
    async def test_lookup_by_cpid_refetches_full_record(self, stamps, make_lookup):
        lookup = make_lookup(*stamps, strip_payload_on_search=True)

        result = await StampAnalyzer(lookup).analyze_stamp_code(
            "A100", AnalyzeOptions(include_dependencies=False)
        )

        assert lookup.lookups == ["A100"]
        assert lookup.id_fetches == [100]
        assert result.stamp.id == 100

    @pytest.mark.asyncio
    async def test_without_dependencies(self, stamps, make_lookup):
        lookup = make_lookup(*stamps)

        result = await StampAnalyzer(lookup).analyze_stamp_code(
            "100", AnalyzeOptions(include_dependencies=False, include_raw_content=True)
        )

        assert lookup.lookups == []
        assert all(not d.is_resolved for d in result.dependencies)
        assert result.raw_content.startswith("<html>")

    @pytest.mark.asyncio
    async def test_optional_sections_default(self, stamps, make_lookup, make_stamp):
        risky = make_stamp(5, "A5", "<script>eval(atob(x)); fetch('https://evil.example')</script>")
        analyzer = StampAnalyzer(make_lookup(risky))

        scored = await analyzer.analyze_stamp_code("5")
        skipped = await analyzer.analyze_stamp_code(
            "5",
            AnalyzeOptions(include_security_analysis=False, include_performance_analysis=False),
        )

        assert scored.security.risk_level == RiskLevel.HIGH
        assert scored.security.is_code_safe is False
        assert skipped.security.risk_level == RiskLevel.LOW
        assert skipped.performance.complexity_score == 0
        assert skipped.performance.estimated_load_time_ms is None

    @pytest.mark.asyncio
    async def test_invalid_identifier(self, make_lookup):
        lookup = make_lookup()
        with pytest.raises(InvalidIdentifierError):
            await StampAnalyzer(lookup).analyze_stamp_code("A-1!")
        assert lookup.lookups == []

    @pytest.mark.asyncio
    async def test_unknown_cpid(self, make_lookup):
        with pytest.raises(StampNotFoundError):
            await StampAnalyzer(make_lookup()).analyze_stamp_code("A404")

    @pytest.mark.asyncio
    async def test_unknown_id(self, make_lookup):
        with pytest.raises(StampNotFoundError):
            await StampAnalyzer(make_lookup()).analyze_stamp_code("404")

    @pytest.mark.asyncio
    async def test_root_without_payload(self, make_lookup, make_stamp):
        lookup = make_lookup(make_stamp(9, "A9", None))
        with pytest.raises(NoContentError, match="No content available"):
            await StampAnalyzer(lookup).analyze_stamp_code("9")

    def test_depth_is_validated(self):
        with pytest.raises(ValidationError):
            AnalyzeOptions(max_depth=11)
        with pytest.raises(ValidationError):
            AnalyzeOptions(max_depth=0)


class TestBuildDependencyGraph:
    @pytest.mark.asyncio
    async def test_renders_requested_format(self, stamps, make_lookup):
        analyzer = StampAnalyzer(make_lookup(*stamps))

        report = await analyzer.build_dependency_graph(
            "A100", DependencyGraphOptions(format=GraphFormat.MERMAID, max_depth=4)
        )

        assert report.rendered.startswith("```mermaid")
        assert "A100 -->|t.js| A200" in report.rendered
        assert report.graph.circular_references == ["A100"]
        assert set(report.graph.nodes) == {"A100", "A200"}

    @pytest.mark.asyncio
    async def test_root_without_payload(self, make_lookup, make_stamp):
        lookup = make_lookup(make_stamp(9, "A9", None))
        with pytest.raises(NoContentError):
            await StampAnalyzer(lookup).build_dependency_graph("9")

    @pytest.mark.asyncio
    async def test_resolution_timeout_truncates(self, stamps, make_lookup):
        analyzer = StampAnalyzer(make_lookup(*stamps), resolution_timeout=1e-9)

        report = await analyzer.build_dependency_graph("100")

        assert report.graph.truncated is True
        assert "deadline" in report.rendered

    def test_format_is_validated(self):
        with pytest.raises(ValidationError):
            DependencyGraphOptions(format="dot")
