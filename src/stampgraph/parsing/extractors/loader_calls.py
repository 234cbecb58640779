import logging
import re
from typing import Generator

from ...core.types import Dependency, DependencyType, LoadMethod
from ..base import ExtractionContext

logger = logging.getLogger(__name__)

# await t.js(["A123", "A456"]) / await t.html(["H4sI..."], 1)
LOADER_CALL_RE = re.compile(r'await\s+t\.(js|html)\(\s*\[([^\]]*)\]')
QUOTED_RE = re.compile(r'"([^"]+)"|\'([^\']+)\'')

_KINDS = {
    "js": (DependencyType.JAVASCRIPT, LoadMethod.T_JS),
    "html": (DependencyType.HTML, LoadMethod.T_HTML),
}


class LoaderCallExtractor:
    """
    Finds dependencies loaded through the recursive loader object ``t``.

    ``t.js`` arguments name other stamps. ``t.html`` arguments are usually
    compressed markup carried inline rather than references.
    """

    @property
    def name(self) -> str:
        return "loader_call"

    @property
    def priority(self) -> int:
        return 100

    def can_extract(self, ctx: ExtractionContext) -> bool:
        return "t.js" in ctx.text or "t.html" in ctx.text

    def extract(self, ctx: ExtractionContext) -> Generator[Dependency, None, None]:
        for match in LOADER_CALL_RE.finditer(ctx.text):
            dep_type, load_method = _KINDS[match.group(1)]
            for item in QUOTED_RE.finditer(match.group(2)):
                reference = item.group(1) or item.group(2)
                if load_method == LoadMethod.T_HTML:
                    logger.debug(f"Found t.html payload ({len(reference)} chars)")
                else:
                    logger.debug(f"Found t.js dependency: {reference}")
                yield Dependency(reference=reference, type=dep_type, load_method=load_method)
