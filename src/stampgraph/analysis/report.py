"""
Human-readable reports for analysis and survey results.
"""

from typing import Dict, List

from ..core.types import AnalysisResult, RiskLevel
from .survey import Recommendation, SurveyResult

PREVIEW_LENGTH = 200
SNIPPET_PREVIEW_LENGTH = 100

_RISK_ICONS = {RiskLevel.LOW: "🟢", RiskLevel.MEDIUM: "🟡", RiskLevel.HIGH: "🔴"}


def _flag(value: bool) -> str:
    return "✅" if value else "❌"


def _complexity_icon(score: float) -> str:
    if score <= 3:
        return "🟢"
    if score <= 6:
        return "🟡"
    return "🔴"


def format_analysis_report(
    result: AnalysisResult,
    include_security: bool = True,
    include_performance: bool = True,
) -> str:
    lines: List[str] = ["🔍 Recursive Stamp Analysis Report", "=====================================", ""]

    stamp = result.stamp
    lines.extend([
        "📄 Stamp Information:",
        f"   ID: {stamp.id}",
        f"   CPID: {stamp.cpid}",
        f"   Creator: {stamp.creator}",
        f"   MIME Type: {stamp.mimetype}",
        f"   Block: {stamp.block_index}",
        "",
    ])

    cs = result.code_structure
    lines.extend([
        "🏗️  Code Structure:",
        f"   Has JavaScript: {_flag(cs.has_javascript)}",
        f"   Has HTML: {_flag(cs.has_html)}",
        f"   Uses Append Framework: {_flag(cs.uses_append_framework)}",
        f"   Is Recursive: {_flag(cs.is_recursive)}",
        f"   Has Async Loading: {_flag(cs.has_async_loading)}",
        f"   Has Error Handling: {_flag(cs.has_error_handling)}",
        "",
    ])

    if result.dependencies:
        lines.append(f"🔗 Dependencies ({len(result.dependencies)}):")
        for i, dep in enumerate(result.dependencies, 1):
            stamp_info = f" (Stamp #{dep.resolved_stamp_id})" if dep.resolved_stamp_id else ""
            lines.append(
                f"   {i}. {_flag(dep.is_resolved)} {dep.reference} "
                f"[{dep.type}/{dep.load_method}]{stamp_info}"
            )
        lines.append("")

    if result.circular_references:
        lines.append("⚠️ Circular References:")
        lines.extend(f"   - {ref}" for ref in result.circular_references)
        lines.append("")

    if result.patterns:
        lines.append(f"🎯 Detected Patterns ({len(result.patterns)}):")
        for i, pattern in enumerate(result.patterns, 1):
            lines.append(f"   {i}. {pattern.name} ({round(pattern.confidence * 100)}% confidence)")
            lines.append(f"      Category: {pattern.category}")
            lines.append(f"      Description: {pattern.description}")
        lines.append("")

    if include_security:
        sec = result.security
        lines.append("🔒 Security Analysis:")
        lines.append(f"   Risk Level: {_RISK_ICONS[sec.risk_level]} {sec.risk_level.upper()}")
        lines.append(f"   Code Safety: {'✅ Safe' if sec.is_code_safe else '⚠️ Potentially Unsafe'}")
        if sec.risks:
            lines.append("   Risks Found:")
            lines.extend(f"     {i}. {risk}" for i, risk in enumerate(sec.risks, 1))
        lines.append("")

    if include_performance:
        perf = result.performance
        lines.append("⚡ Performance Analysis:")
        lines.append(
            f"   Complexity Score: {_complexity_icon(perf.complexity_score)} "
            f"{perf.complexity_score:.1f}/10"
        )
        lines.append(f"   Dependency Count: {perf.dependency_count}")
        lines.append(f"   Max Dependency Depth: {perf.max_dependency_depth}")
        if perf.estimated_load_time_ms:
            lines.append(f"   Estimated Load Time: {perf.estimated_load_time_ms:.0f}ms")
        lines.append("")

    if result.decoded_content:
        content = result.decoded_content
        ellipsis = "..." if len(content) > PREVIEW_LENGTH else ""
        lines.append("📝 Decoded HTML Content:")
        lines.append(f"   Length: {len(content)} characters")
        lines.append(f"   Preview: {content[:PREVIEW_LENGTH]}{ellipsis}")
        lines.append("")

    lines.append(f"📊 Analysis completed at {result.analysis_timestamp.isoformat()}")
    return "\n".join(lines)


def format_survey_report(result: SurveyResult) -> str:
    meta = result.analysis_metadata
    stats = result.statistics
    lines: List[str] = [
        "# Recursive Stamp Pattern Analysis Report",
        "",
        f"**Analysis Date:** {meta.analysis_date.isoformat()}",
        f"**Stamps Analyzed:** {meta.total_stamps_analyzed}",
        f"**Analysis Duration:** {meta.analysis_duration_ms:.0f}ms",
        f"**Pattern Types:** {', '.join(meta.pattern_types_analyzed)}",
        f"**Minimum Occurrences:** {meta.min_occurrences_threshold}",
        "",
        "## 📊 Summary Statistics",
        "",
        f"- **Total Patterns Found:** {stats.total_patterns_found}",
        f"- **Most Common Pattern:** {stats.most_common_pattern}",
        f"- **Average Complexity:** {stats.average_pattern_complexity:.1f}/10",
        "",
        "### Patterns by Category:",
    ]
    lines.extend(f"- **{cat}:** {count} patterns" for cat, count in stats.patterns_by_category.items())
    lines.extend(["", "## 🔍 Discovered Patterns", ""])

    names = {p.pattern_id: p.pattern_name for p in result.discovered_patterns}

    for pattern in result.discovered_patterns[:10]:
        lines.extend([
            f"### {pattern.pattern_name}",
            f"**Category:** {pattern.category}",
            f"**Occurrences:** {pattern.occurrences} ({pattern.frequency_percentage:.1f}%)",
            f"**Complexity:** {pattern.complexity_score}/10",
            f"**Description:** {pattern.description}",
            "",
        ])
        if pattern.examples:
            lines.append("**Examples:**")
            for example in pattern.examples[:2]:
                lines.append(
                    f"- Stamp {example.cpid}: `{example.code_snippet[:SNIPPET_PREVIEW_LENGTH]}...`"
                )
            lines.append("")

    lines.extend(["## 📈 Category Analysis", ""])
    for category in result.pattern_categories:
        lines.extend([
            f"### {category.category}",
            f"- **Patterns:** {category.pattern_count}",
            f"- **Total Occurrences:** {category.total_occurrences}",
            f"- **Average Complexity:** {category.average_complexity:.1f}/10",
            "",
        ])

    if result.recommendations:
        lines.extend(["## 💡 Recommendations", ""])
        by_type: Dict[str, List[Recommendation]] = {}
        for rec in result.recommendations:
            by_type.setdefault(rec.type.value, []).append(rec)
        for rec_type, recs in by_type.items():
            lines.append(f"### {rec_type.replace('_', ' ').upper()}")
            for rec in recs[:3]:
                lines.append(f"- **{names.get(rec.pattern_id, rec.pattern_id)}**: {rec.reason}")
            lines.append("")

    if result.trending_patterns:
        lines.extend(["## 🚀 Trending Patterns", ""])
        for trend in result.trending_patterns:
            lines.append(
                f"- **{names.get(trend.pattern_id, trend.pattern_id)}**: "
                f"{trend.growth_rate:.1f}% adoption, {trend.recent_adoptions} recent uses"
            )
        lines.append("")

    return "\n".join(lines)
