"""
Unit tests for the pattern survey.
"""

import pytest
from pydantic import ValidationError

from stampgraph.analysis.survey import (
    SURVEY_RULES,
    PatternSurvey,
    PatternUsage,
    RecommendationType,
    SurveyFamily,
    SurveyOptions,
    extract_snippet,
    recommendations,
    sort_patterns,
    trending_patterns,
)

APPEND_SOURCE = """<script>
const t = new Append();
t.appendCB = async () => {
  try {
    await t.js(["A1111111111111111111", "A2222222222222222222"]);
    await t.html(["H4sI"]);
  } catch (e) { console.error(e); }
};
</script>"""

PLAIN_SOURCE = "<script>requestAnimationFrame(draw); el.innerHTML = 'x';</script>"


def _rule(pattern_id: str):
    return next(r for r in SURVEY_RULES if r.pattern_id == pattern_id)


def _usage(pattern_id, name, family, occurrences, complexity, frequency=0.0):
    return PatternUsage(
        pattern_id=pattern_id,
        pattern_name=name,
        description="",
        category=family,
        occurrences=occurrences,
        frequency_percentage=frequency,
        complexity_score=complexity,
    )


@pytest.fixture
def stamps(make_stamp):
    return [
        make_stamp(1, "A1", APPEND_SOURCE),
        make_stamp(2, "A2", APPEND_SOURCE, compress=True),
        make_stamp(3, "A3", APPEND_SOURCE),
        make_stamp(4, "A4", PLAIN_SOURCE),
        make_stamp(5, "A5", None),
    ]


class TestRules:
    def test_all_of_and_any_of(self):
        assert _rule("append_framework").detect(APPEND_SOURCE) is not None
        assert _rule("append_framework").detect("new Append(); t.js([])") is None
        assert _rule("promise_based_loading").detect("Promise.all(x)") is None
        assert _rule("promise_based_loading").detect("Promise.all(x).then(go)") is not None

    def test_multi_stamp_composition_counts_references(self):
        hit = _rule("multi_stamp_composition").detect(APPEND_SOURCE)
        assert hit.variation_notes == "References 2 other stamps"
        assert "A1111111111111111111" in hit.snippet
        assert _rule("multi_stamp_composition").detect('t.js(["A1111111111111111111"])') is None

    def test_extract_snippet(self):
        content = "x" * 100 + "needle" + "y" * 300
        snippet = extract_snippet(content, "needle")
        assert snippet.startswith("x" * 50 + "needle")
        assert len(snippet) == 250
        assert extract_snippet(content, "absent") == ""


class TestPatternSurvey:
    def test_counts_and_threshold(self, stamps):
        result = PatternSurvey().run(stamps)

        found = {p.pattern_id: p for p in result.discovered_patterns}
        assert set(found) == {
            "append_framework",
            "async_loading",
            "try_catch_error_handling",
            "console_error_logging",
            "multi_stamp_composition",
        }
        assert found["append_framework"].occurrences == 3
        assert found["append_framework"].frequency_percentage == pytest.approx(60.0)
        assert len(found["append_framework"].examples) == 3
        assert result.analysis_metadata.total_stamps_analyzed == 5

    def test_lower_threshold_includes_single_hits(self, stamps):
        result = PatternSurvey().run(stamps, SurveyOptions(min_occurrences=2))
        ids = {p.pattern_id for p in result.discovered_patterns}
        assert "animation_frame_optimization" not in ids

        single = PatternSurvey().run(stamps + [stamps[3]], SurveyOptions(min_occurrences=2))
        assert "animation_frame_optimization" in {p.pattern_id for p in single.discovered_patterns}

    def test_family_filter(self, stamps):
        options = SurveyOptions(pattern_types=[SurveyFamily.ERROR_HANDLING])
        result = PatternSurvey().run(stamps, options)

        assert {p.category for p in result.discovered_patterns} == {SurveyFamily.ERROR_HANDLING}
        assert [c.category for c in result.pattern_categories] == [SurveyFamily.ERROR_HANDLING]

    def test_examples_can_be_dropped(self, stamps):
        result = PatternSurvey().run(stamps, SurveyOptions(include_examples=False))
        assert all(p.examples == [] for p in result.discovered_patterns)

    def test_statistics(self, stamps):
        result = PatternSurvey().run(stamps)

        assert result.statistics.total_patterns_found == 5
        assert result.statistics.most_common_pattern == result.discovered_patterns[0].pattern_name
        assert result.statistics.patterns_by_category["error_handling"] == 2

    def test_empty_collection(self):
        result = PatternSurvey().run([])
        assert result.discovered_patterns == []
        assert result.statistics.most_common_pattern == "None"

    @pytest.mark.parametrize("value", [1, 101])
    def test_min_occurrences_is_validated(self, value):
        with pytest.raises(ValidationError):
            SurveyOptions(min_occurrences=value)


class TestRanking:
    def test_sort_orders(self):
        patterns = [
            _usage("b", "beta", SurveyFamily.FRAMEWORKS, 5, 2),
            _usage("a", "Alpha", SurveyFamily.FRAMEWORKS, 3, 9),
            _usage("c", "gamma", SurveyFamily.FRAMEWORKS, 8, 4),
        ]
        assert [p.pattern_id for p in sort_patterns(patterns, "frequency")] == ["c", "b", "a"]
        assert [p.pattern_id for p in sort_patterns(patterns, "complexity")] == ["a", "c", "b"]
        assert [p.pattern_id for p in sort_patterns(patterns, "alphabetical")] == ["a", "b", "c"]

    def test_recommendations(self):
        patterns = [
            _usage("easy", "Easy", SurveyFamily.COMPOSITION_PATTERNS, 4, 3, frequency=40.0),
            _usage("hard", "Hard", SurveyFamily.FRAMEWORKS, 4, 8),
            _usage("fast", "Fast", SurveyFamily.OPTIMIZATION_TECHNIQUES, 4, 5),
            _usage("safe", "Safe", SurveyFamily.ERROR_HANDLING, 4, 4),
        ]
        recs = {(r.pattern_id, r.type) for r in recommendations(patterns)}
        assert recs == {
            ("easy", RecommendationType.BEGINNER_FRIENDLY),
            ("hard", RecommendationType.ADVANCED),
            ("fast", RecommendationType.PERFORMANCE),
            ("safe", RecommendationType.SECURITY),
        }

    def test_recommendations_are_capped(self):
        patterns = [
            _usage(f"p{i}", f"P{i}", SurveyFamily.ERROR_HANDLING, 4, 8) for i in range(8)
        ]
        assert len(recommendations(patterns)) == 10

    def test_trending(self):
        patterns = [
            _usage(f"p{i}", f"P{i}", SurveyFamily.FRAMEWORKS, 10, 5, frequency=50.0)
            for i in range(7)
        ] + [_usage("rare", "Rare", SurveyFamily.FRAMEWORKS, 1, 5, frequency=5.0)]

        trending = trending_patterns(patterns)

        assert len(trending) == 5
        assert all(t.pattern_id != "rare" for t in trending)
        assert trending[0].recent_adoptions == 3
