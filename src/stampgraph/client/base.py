"""
Stamp lookup protocol.

The resolver and analyzer depend only on this interface. Implementations must
raise StampNotFoundError for a missing stamp and StampLookupError for
transport failures so callers can tell the two apart.
"""

from typing import Optional, Protocol

from ..core.types import StampRecord


class StampLookup(Protocol):
    async def lookup_by_identifier(self, reference: str) -> Optional[StampRecord]:
        """Find a stamp by its reference identifier (cpid). None when absent."""
        ...

    async def get_by_id(self, stamp_id: int) -> StampRecord:
        """Fetch a stamp by numeric id. Raises StampNotFoundError when absent."""
        ...
