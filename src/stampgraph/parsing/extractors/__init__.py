"""Dependency extractors for stamp source."""

from .loader_calls import LoaderCallExtractor
from .script_refs import ScriptSrcExtractor, SetAttributeExtractor

__all__ = ["LoaderCallExtractor", "ScriptSrcExtractor", "SetAttributeExtractor"]
