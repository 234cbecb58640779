"""
Shared fixtures: stamp factories and an in-memory lookup service.
"""

import base64
import gzip
from typing import Dict, Iterable, List, Optional

import pytest

from stampgraph.core.exceptions import StampNotFoundError
from stampgraph.core.types import StampRecord


def encode_source(source: str, compress: bool = False) -> str:
    data = source.encode("utf-8")
    if compress:
        data = gzip.compress(data)
    return base64.b64encode(data).decode("ascii")


def build_stamp(
    stamp_id: int,
    cpid: str,
    source: Optional[str] = None,
    compress: bool = False,
    **fields,
) -> StampRecord:
    payload = encode_source(source, compress) if source is not None else None
    return StampRecord(
        stamp=stamp_id,
        cpid=cpid,
        stamp_base64=payload,
        creator=fields.pop("creator", "bc1qcreatoraddress0000000000"),
        stamp_mimetype=fields.pop("stamp_mimetype", "text/html"),
        block_index=fields.pop("block_index", 800000 + stamp_id),
        tx_hash=fields.pop("tx_hash", f"{stamp_id:064x}"),
        supply=fields.pop("supply", 1),
        locked=fields.pop("locked", 1),
        **fields,
    )


class FakeLookup:
    """
    In-memory StampLookup.

    ``failures`` maps a cpid to the exception its lookup raises. With
    ``strip_payload_on_search`` the cpid lookup returns records without a
    payload, the way the real listing endpoint does.
    """

    def __init__(
        self,
        stamps: Iterable[StampRecord] = (),
        failures: Optional[Dict[str, Exception]] = None,
        strip_payload_on_search: bool = False,
    ):
        stamps = list(stamps)
        self.by_cpid = {s.cpid: s for s in stamps}
        self.by_id = {s.stamp_id: s for s in stamps}
        self.failures = failures or {}
        self.strip_payload_on_search = strip_payload_on_search
        self.lookups: List[str] = []
        self.id_fetches: List[int] = []

    async def lookup_by_identifier(self, reference: str) -> Optional[StampRecord]:
        self.lookups.append(reference)
        if reference in self.failures:
            raise self.failures[reference]
        record = self.by_cpid.get(reference)
        if record is not None and self.strip_payload_on_search:
            return record.model_copy(update={"stamp_base64": None})
        return record

    async def get_by_id(self, stamp_id: int) -> StampRecord:
        self.id_fetches.append(stamp_id)
        record = self.by_id.get(stamp_id)
        if record is None:
            raise StampNotFoundError(str(stamp_id))
        return record

    async def __aenter__(self) -> "FakeLookup":
        return self

    async def __aexit__(self, *args) -> None:
        return None


@pytest.fixture
def make_stamp():
    return build_stamp


@pytest.fixture
def encode():
    return encode_source


@pytest.fixture
def make_lookup():
    def _make(*stamps: StampRecord, **kwargs) -> FakeLookup:
        return FakeLookup(stamps, **kwargs)
    return _make
