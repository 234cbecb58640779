import logging
import re
from typing import Generator

from ...core.types import Dependency, DependencyType, LoadMethod
from ..base import ExtractionContext

logger = logging.getLogger(__name__)

# Path prefix under which the content host serves stamp bodies
CONTENT_PATH_PREFIX = "/s/"

SCRIPT_SRC_RE = re.compile(r'src\s*=\s*["\']/s/([^"\']+)["\']')
SET_ATTRIBUTE_RE = re.compile(
    r'setAttribute\s*\(\s*["\']src["\']\s*,\s*["\']/s/([^"\']+)["\']\s*\)'
)


class ScriptSrcExtractor:
    """<script src="/s/A123"> style references."""

    @property
    def name(self) -> str:
        return "script_src"

    @property
    def priority(self) -> int:
        return 80

    def can_extract(self, ctx: ExtractionContext) -> bool:
        return CONTENT_PATH_PREFIX in ctx.text

    def extract(self, ctx: ExtractionContext) -> Generator[Dependency, None, None]:
        for match in SCRIPT_SRC_RE.finditer(ctx.text):
            logger.debug(f"Found script src dependency: {match.group(1)}")
            yield Dependency(
                reference=match.group(1),
                type=DependencyType.SCRIPT_SRC,
                load_method=LoadMethod.SCRIPT_TAG,
            )


class SetAttributeExtractor:
    """el.setAttribute("src", "/s/A123") on dynamically created elements."""

    @property
    def name(self) -> str:
        return "set_attribute"

    @property
    def priority(self) -> int:
        return 60

    def can_extract(self, ctx: ExtractionContext) -> bool:
        return "setAttribute" in ctx.text and CONTENT_PATH_PREFIX in ctx.text

    def extract(self, ctx: ExtractionContext) -> Generator[Dependency, None, None]:
        for match in SET_ATTRIBUTE_RE.finditer(ctx.text):
            logger.debug(f"Found setAttribute script dependency: {match.group(1)}")
            yield Dependency(
                reference=match.group(1),
                type=DependencyType.SCRIPT_SRC,
                load_method=LoadMethod.SCRIPT_TAG,
            )
