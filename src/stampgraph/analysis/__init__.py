"""Stamp analysis: risk scoring, pattern survey and orchestration."""

from .analyzer import AnalyzeOptions, DependencyGraphOptions, StampAnalyzer, parse_identifier
from .report import format_analysis_report, format_survey_report
from .risk import analyze_performance, analyze_security
from .survey import PatternSurvey, SurveyOptions, SurveyResult

__all__ = [
    "AnalyzeOptions",
    "DependencyGraphOptions",
    "PatternSurvey",
    "StampAnalyzer",
    "SurveyOptions",
    "SurveyResult",
    "analyze_performance",
    "analyze_security",
    "format_analysis_report",
    "format_survey_report",
    "parse_identifier",
]
