"""
Notion database extractor with cursor pagination and fixed request pacing.

Notion returns database pages in chunks and caps the number of requests per
minute, so every page request is followed by a fixed pause. A collection is
fetched all-or-nothing: if any page request fails the records gathered so
far are dropped and a FetchError is raised.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from core.exceptions import (
    AuthenticationError,
    FetchError,
    RateLimitError,
    ResourceNotFoundError,
)
from schemas.notion import QueryResponse

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"


class NotionPager:
    """
    Fetch every page of a Notion database.

    No local cursor state survives across calls, so re-running `fetch_all`
    for the same collection is safe and returns the then-current remote state.
    Failed requests are not retried; the only delay is the pacing pause.

    Attributes:
        page_size: Records requested per page (Notion caps this at 100)
        page_delay: Seconds to wait after each page response (default: 0.5)
        timeout: Per-request timeout in seconds (default: 30.0)
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        notion_version: str = DEFAULT_NOTION_VERSION,
        page_size: int = 100,
        page_delay: float = 0.5,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.notion_version = notion_version
        self.page_size = page_size
        self.page_delay = page_delay
        self.timeout = timeout
        self.transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Notion-Version": self.notion_version,
            "Content-Type": "application/json"
        }

    def query_url(self, collection_id: str) -> str:
        return f"{self.api_url}/databases/{collection_id}/query"

    async def fetch_all(self, collection_id: str) -> List[Dict[str, Any]]:
        """
        Fetch all records of a collection in response order.

        Args:
            collection_id: Notion database id

        Returns:
            Raw page dicts, exactly as delivered by the API

        Raises:
            FetchError: If any page request fails (no partial result is returned)
        """
        records: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        page = 0
        has_more = True

        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=self.headers,
            transport=self.transport
        ) as client:
            while has_more:
                page += 1
                context = {
                    "collection_id": collection_id,
                    "page": page,
                    "records_fetched": len(records)
                }

                response = await self._query_page(client, collection_id, cursor, context)

                records.extend(response.results)
                cursor = response.next_cursor
                has_more = response.has_more
                logger.info(
                    f"Fetched page {page} of {collection_id}: "
                    f"count={len(records)}, has_more={has_more}"
                )

                if has_more and not cursor:
                    raise FetchError(
                        "Response signals more pages but carries no cursor",
                        context=context
                    )

                await asyncio.sleep(self.page_delay)

        logger.info(f"Fetched {len(records)} records from {collection_id} ({page} pages)")
        return records

    async def _query_page(
        self,
        client: httpx.AsyncClient,
        collection_id: str,
        cursor: Optional[str],
        context: Dict[str, Any]
    ) -> QueryResponse:
        """Issue one query request and validate its body"""
        body: Dict[str, Any] = {"page_size": self.page_size}
        if cursor:
            body["start_cursor"] = cursor

        url = self.query_url(collection_id)

        try:
            response = await client.post(url, json=body)
        except httpx.TimeoutException as e:
            raise FetchError(
                "Request timed out",
                context={**context, "timeout": self.timeout},
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise FetchError(
                "Request failed",
                context={**context, "api_url": url},
                original_exception=e
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(
                "Failed to parse JSON response",
                context={
                    **context,
                    "status_code": response.status_code,
                    "response_body": response.text[:500]
                },
                original_exception=e
            )

        if response.status_code >= 400 or (isinstance(data, dict) and data.get("object") == "error"):
            self._raise_for_error(response, data, context)

        try:
            return QueryResponse.model_validate(data)
        except ValidationError as e:
            raise FetchError(
                "Unexpected response shape",
                context={**context, "status_code": response.status_code},
                original_exception=e
            )

    @staticmethod
    def _raise_for_error(response: httpx.Response, data: Any, context: Dict[str, Any]):
        """Map an error response to the matching FetchError subclass"""
        payload = data if isinstance(data, dict) else {}
        status_code = response.status_code
        message = payload.get("message") or f"HTTP {status_code}"
        error_context = {
            **context,
            "status_code": status_code,
            "notion_code": payload.get("code")
        }

        if status_code in (401, 403):
            raise AuthenticationError(message, context=error_context)

        if status_code == 404:
            raise ResourceNotFoundError(message, context=error_context)

        if status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                message,
                context=error_context,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
            )

        raise FetchError(message, context=error_context)
