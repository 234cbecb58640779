"""
HTTP client for the Stampchain API.

Thin async wrapper over httpx. No retries and no authentication: a failed
request surfaces immediately as StampLookupError.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..core.exceptions import StampLookupError, StampNotFoundError
from ..core.types import StampRecord

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://stampchain.io/api/v2"
DEFAULT_TIMEOUT = 30.0


class StampchainClient:
    """
    Async client implementing the StampLookup protocol.

    Usage:
        async with StampchainClient() as client:
            record = await client.get_by_id(12345)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "StampchainClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        identifier: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        GET an endpoint and return its JSON object body.

        Args:
            identifier: What was asked for, reported by StampNotFoundError on 404.
        """
        try:
            response = await self.client.get(endpoint, params=params)
        except httpx.TimeoutException:
            logger.warning(f"Request to {endpoint} timed out")
            raise StampLookupError(
                f"Request timed out after {self.timeout}s", endpoint=endpoint
            ) from None
        except httpx.RequestError as e:
            logger.warning(f"Request to {endpoint} failed: {e}")
            raise StampLookupError(f"Network error: {e}", endpoint=endpoint) from e

        if response.status_code == 404:
            raise StampNotFoundError(identifier or endpoint)
        if response.status_code >= 400:
            raise StampLookupError(
                f"API returned HTTP {response.status_code}",
                status_code=response.status_code,
                endpoint=endpoint,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise StampLookupError(
                "API returned invalid JSON", status_code=response.status_code, endpoint=endpoint
            ) from e

        if not isinstance(body, dict):
            raise StampLookupError(
                "API returned unexpected payload", status_code=response.status_code, endpoint=endpoint
            )
        return body

    @staticmethod
    def _parse(raw: Any, endpoint: str) -> StampRecord:
        try:
            return StampRecord.model_validate(raw)
        except ValidationError as e:
            raise StampLookupError(f"Malformed stamp record: {e}", endpoint=endpoint) from e

    async def get_stamp(self, stamp_id: int) -> StampRecord:
        endpoint = f"/stamps/{stamp_id}"
        body = await self._get(endpoint, identifier=str(stamp_id))
        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise StampLookupError("API returned unexpected payload", endpoint=endpoint)
        stamp = data.get("stamp")
        if not stamp:
            raise StampNotFoundError(str(stamp_id))
        return self._parse(stamp, endpoint)

    async def search_stamps(self, **params: Any) -> List[StampRecord]:
        query = {k: v for k, v in params.items() if v is not None}
        identifier = ", ".join(f"{k}={v}" for k, v in query.items()) or None
        body = await self._get("/stamps", params=query, identifier=identifier)
        data = body.get("data") or []
        if not isinstance(data, list):
            raise StampLookupError("API returned unexpected payload", endpoint="/stamps")
        return [self._parse(item, "/stamps") for item in data]

    async def lookup_by_identifier(self, reference: str) -> Optional[StampRecord]:
        logger.debug(f"Looking up stamp by cpid {reference}")
        try:
            results = await self.search_stamps(cpid=reference)
        except StampNotFoundError:
            return None
        return results[0] if results else None

    async def get_by_id(self, stamp_id: int) -> StampRecord:
        logger.debug(f"Fetching stamp {stamp_id}")
        return await self.get_stamp(stamp_id)
