"""Firebase Storage HTTP client for product images.

Lists the objects in a product's image folder and resolves each
object's download URL through the Firebase Storage REST API.
"""

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from kaayko.domain.exceptions import ImageResolutionError, RemoteUnavailableError
from kaayko.infrastructure.config import Settings
from kaayko.infrastructure.store import ImageSource

logger = structlog.get_logger()


class StorageImageClient(ImageSource):
    """HTTP client for one Firebase Storage bucket.

    Object names look like ``<namespace>/<productID>/<file>``. Download
    URLs carry the object's first download token when it has one.
    """

    def __init__(
        self,
        bucket: str,
        base_url: str = "https://firebasestorage.googleapis.com/v0",
        namespace: str = "kaaykoStoreTShirtImages",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize storage client.

        Args:
            bucket: Storage bucket name.
            base_url: Firebase Storage REST API root.
            namespace: Top-level folder holding the product folders.
            timeout: Request timeout in seconds.
            transport: Optional transport override.
        """
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.namespace = namespace
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageImageClient":
        """Create a client from application settings."""
        return cls(
            bucket=settings.storage_bucket,
            base_url=settings.storage_api_url,
            namespace=settings.image_namespace,
            timeout=settings.storage_timeout_seconds,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def folder_prefix(self, product_key: str) -> str:
        """Object name prefix of a product's image folder."""
        return f"{self.namespace}/{product_key}/"

    def _object_path(self, object_name: str) -> str:
        return f"/b/{self.bucket}/o/{quote(object_name, safe='')}"

    def download_url(self, object_name: str, token: str | None) -> str:
        """Build the public download URL of an object.

        Args:
            object_name: Full object name.
            token: Download token, if the object has one.

        Returns:
            Download URL.
        """
        url = f"{self.base_url}{self._object_path(object_name)}?alt=media"
        if token:
            url += f"&token={token}"
        return url

    async def list_objects(self, product_key: str) -> list[str]:
        """List the object names in a product's image folder.

        Follows ``nextPageToken`` until the listing is complete.

        Args:
            product_key: The product's ``productID``.

        Returns:
            Object names in listing order.

        Raises:
            RemoteUnavailableError: On request failure, non-200 status or
                a body that is not a storage listing.
        """
        prefix = self.folder_prefix(product_key)
        names: list[str] = []
        page_token: str | None = None

        try:
            client = await self._get_client()
            while True:
                params: dict[str, Any] = {"prefix": prefix, "delimiter": "/"}
                if page_token:
                    params["pageToken"] = page_token

                response = await client.get(f"/b/{self.bucket}/o", params=params)

                if response.status_code != 200:
                    raise RemoteUnavailableError(
                        "list_objects",
                        f"HTTP {response.status_code} listing {prefix}: {response.text}",
                    )

                try:
                    data = response.json()
                    names.extend(item["name"] for item in data.get("items", []))
                    page_token = data.get("nextPageToken")
                except (ValueError, KeyError, TypeError, AttributeError) as e:
                    logger.error(
                        "Malformed storage listing",
                        bucket=self.bucket,
                        prefix=prefix,
                        error=repr(e),
                    )
                    raise RemoteUnavailableError(
                        "list_objects", f"Malformed listing for {prefix}: {e!r}"
                    ) from e
                if not page_token:
                    break

        except httpx.RequestError as e:
            logger.error(
                "Storage listing request failed",
                bucket=self.bucket,
                prefix=prefix,
                error=str(e),
            )
            raise RemoteUnavailableError("list_objects", f"Request failed: {str(e)}") from e

        return names

    async def resolve_url(self, object_name: str) -> str:
        """Resolve the download URL of one object from its metadata.

        Args:
            object_name: Full object name.

        Returns:
            Download URL.

        Raises:
            ImageResolutionError: On request failure or non-200 status.
        """
        try:
            client = await self._get_client()
            response = await client.get(self._object_path(object_name))
        except httpx.RequestError as e:
            raise ImageResolutionError(object_name, f"Request failed: {str(e)}") from e

        if response.status_code != 200:
            raise ImageResolutionError(
                object_name, f"HTTP {response.status_code}: {response.text}"
            )

        try:
            tokens = response.json().get("downloadTokens") or ""
        except (ValueError, AttributeError) as e:
            raise ImageResolutionError(object_name, f"Malformed metadata: {e!r}") from e
        token = tokens.split(",")[0].strip() or None
        return self.download_url(object_name, token)
