"""Decoding and static matching of stamp source."""

from .decoder import decode_content
from .matcher import MatchResult, PatternMatcher
from .rules import DEFAULT_RULES, PatternRule

__all__ = ["DEFAULT_RULES", "MatchResult", "PatternMatcher", "PatternRule", "decode_content"]
