"""Remote catalog HTTP client.

Reads product templates and their variants from the authoritative remote
catalog (an OData API). Authentication headers live here and nowhere
else; callers see failures as RemoteCatalogError.
"""

import time
from collections.abc import Callable
from typing import Any

import httpx
import structlog

from variant_engine.domain.models import RemoteVariant
from variant_engine.infrastructure.config import settings

logger = structlog.get_logger()

TEMPLATE_LOOKUP_PATH = "/odata/ProductTemplate/OdataService.GetViewV2"
TEMPLATE_VARIANTS_EXPAND = "ProductVariants($expand=UOM,Categ,UOMPO,POSCateg,AttributeValues)"


class RemoteCatalogError(Exception):
    """Error from a remote catalog API call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# ============================================================================
# Template Id Cache
# ============================================================================


class TemplateIdCache:
    """Caller-scoped cache of product code -> remote template id.

    Entries expire after ``ttl_seconds``. Create one per sync session;
    instances are never shared through module state.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            ttl_seconds: Entry lifetime (defaults to settings).
            clock: Monotonic time source.
        """
        self.ttl_seconds = (
            settings.template_id_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._clock = clock
        self._entries: dict[str, tuple[int, float]] = {}

    def get(self, code: str) -> int | None:
        """Get a cached template id.

        Args:
            code: Product code.

        Returns:
            Template id, or None if absent or expired.
        """
        entry = self._entries.get(code)
        if entry is None:
            return None
        template_id, stored_at = entry
        if self._clock() - stored_at > self.ttl_seconds:
            del self._entries[code]
            return None
        return template_id

    def set(self, code: str, template_id: int) -> None:
        """Cache a template id for a product code."""
        self._entries[code] = (template_id, self._clock())

    def clear(self) -> None:
        """Drop all cached entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# ============================================================================
# Remote Catalog Client
# ============================================================================


class RemoteCatalogClient:
    """HTTP client for the remote product catalog.

    Example usage:
        async with RemoteCatalogClient(token="...") as client:
            template_id = await client.fetch_template_id_by_code("N497")
            variants = await client.fetch_variants_by_template_id(template_id)
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize remote catalog client.

        Args:
            base_url: API root (defaults to settings).
            token: Bearer token (defaults to settings).
            timeout: Request timeout in seconds (defaults to settings).
        """
        self.base_url = base_url or settings.remote_base_url
        self.token = settings.remote_token if token is None else token
        self.timeout = timeout or settings.remote_timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_template_id_by_code(self, code: str) -> int | None:
        """Find the remote template id of a product code.

        Args:
            code: Base product code.

        Returns:
            Template id, or None if the remote catalog has no such product.

        Raises:
            RemoteCatalogError: On API error.
        """
        try:
            client = await self._get_client()
            response = await client.get(
                TEMPLATE_LOOKUP_PATH,
                params={"Active": "true", "DefaultCode": code},
            )

            if response.status_code != 200:
                raise RemoteCatalogError(
                    f"Failed to look up template {code}: {response.text}",
                    response.status_code,
                )

            items = response.json().get("value") or []
            if not items:
                logger.info("Remote template not found", code=code)
                return None
            return int(items[0]["Id"])

        except httpx.RequestError as e:
            logger.error(
                "Remote catalog request failed",
                code=code,
                error=str(e),
            )
            raise RemoteCatalogError(f"Request failed: {str(e)}") from e

    async def fetch_variants_by_template_id(self, template_id: int) -> list[RemoteVariant]:
        """Fetch all variants of a remote template.

        Args:
            template_id: Remote template id.

        Returns:
            Variants of the template (empty if it has none).

        Raises:
            RemoteCatalogError: On API error, including an unknown template.
        """
        try:
            client = await self._get_client()
            response = await client.get(
                f"/odata/ProductTemplate({template_id})",
                params={"$expand": TEMPLATE_VARIANTS_EXPAND},
            )

            if response.status_code != 200:
                raise RemoteCatalogError(
                    f"Failed to fetch variants of template {template_id}: {response.text}",
                    response.status_code,
                )

            data: dict[str, Any] = response.json()
            return [
                RemoteVariant.from_api_response(v)
                for v in data.get("ProductVariants") or []
            ]

        except httpx.RequestError as e:
            logger.error(
                "Remote catalog request failed",
                template_id=template_id,
                error=str(e),
            )
            raise RemoteCatalogError(f"Request failed: {str(e)}") from e

    async def __aenter__(self) -> "RemoteCatalogClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Context manager exit."""
        await self.close()
