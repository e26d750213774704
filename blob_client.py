import logging
from typing import Optional, Dict, Any, List

import httpx

import config
from errors import ConfigurationError, UpstreamError
from models import BlobListing


logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class BlobClient:
    """Client for the Vercel Blob listing API"""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = config.BLOB_API_URL,
        timeout: float = config.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token if token is not None else config.BLOB_READ_WRITE_TOKEN
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            raise ConfigurationError("BLOB_READ_WRITE_TOKEN is not set")
        return {
            "Authorization": f"Bearer {self.token}",
            "x-api-version": config.BLOB_API_VERSION,
        }

    async def list(
        self,
        prefix: Optional[str] = None,
        limit: int = PAGE_SIZE,
        cursor: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> BlobListing:
        """List one page of objects, or of top-level folders when mode='folded'"""
        params: Dict[str, Any] = {"limit": limit}
        if prefix:
            params["prefix"] = prefix
        if cursor:
            params["cursor"] = cursor
        if mode:
            params["mode"] = mode

        headers = self._headers()
        try:
            response = await self.client.get(
                f"{self.base_url}/", params=params, headers=headers
            )
        except httpx.RequestError as e:
            logger.error("Blob listing request failed: %s", e)
            raise UpstreamError(f"Blob listing request failed: {e}") from e

        if response.is_error:
            raise UpstreamError(
                f"Blob listing returned HTTP {response.status_code}",
                payload=_error_payload(response),
                status_code=response.status_code,
            )

        return BlobListing.model_validate(response.json())

    async def list_folders(self) -> List[str]:
        """List every top-level folder, following the cursor across pages"""
        folders: List[str] = []
        cursor = None
        while True:
            page = await self.list(cursor=cursor, mode="folded")
            folders.extend(page.folders)
            if not page.has_more or not page.cursor:
                return folders
            cursor = page.cursor


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
