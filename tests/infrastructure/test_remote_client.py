"""Tests for the remote catalog client."""

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from variant_engine.infrastructure.remote_client import (
    TEMPLATE_LOOKUP_PATH,
    RemoteCatalogClient,
    RemoteCatalogError,
    TemplateIdCache,
)


def _response(status_code: int, payload: dict | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = "error body"
    return response


class TestRemoteCatalogClient:
    """Tests for RemoteCatalogClient."""

    @pytest.fixture
    def client(self):
        """Create a test client."""
        return RemoteCatalogClient(
            base_url="https://catalog.test",
            token="secret",
            timeout=5,
        )

    @pytest.mark.asyncio
    async def test_client_initialization(self, client):
        """Test client initialization."""
        assert client.base_url == "https://catalog.test"
        assert client.token == "secret"
        assert client._client is None

    @pytest.mark.asyncio
    async def test_http_client_carries_auth_headers(self, client):
        """Test the lazily created HTTP client is authenticated."""
        http_client = await client._get_client()
        try:
            assert http_client.headers["Authorization"] == "Bearer secret"
            assert http_client.headers["Accept"] == "application/json"
            assert await client._get_client() is http_client
        finally:
            await client.close()
        assert client._client is None

    @pytest.mark.asyncio
    async def test_fetch_template_id(self, client):
        """Test template lookup returns the first match."""
        mock_response = _response(200, {"value": [{"Id": 1234}, {"Id": 99}]})

        with patch.object(
            client, "_get_client", new_callable=AsyncMock
        ) as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(return_value=mock_response)
            mock_get_client.return_value = mock_http_client

            template_id = await client.fetch_template_id_by_code("N497")

            assert template_id == 1234
            mock_http_client.get.assert_awaited_once_with(
                TEMPLATE_LOOKUP_PATH,
                params={"Active": "true", "DefaultCode": "N497"},
            )

    @pytest.mark.asyncio
    async def test_fetch_template_id_not_found(self, client):
        """Test template lookup with no match."""
        with patch.object(
            client, "_get_client", new_callable=AsyncMock
        ) as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(return_value=_response(200, {"value": []}))
            mock_get_client.return_value = mock_http_client

            assert await client.fetch_template_id_by_code("NOPE") is None

    @pytest.mark.asyncio
    async def test_fetch_template_id_error_status(self, client):
        """Test non-200 responses raise with the status code."""
        with patch.object(
            client, "_get_client", new_callable=AsyncMock
        ) as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(return_value=_response(401))
            mock_get_client.return_value = mock_http_client

            with pytest.raises(RemoteCatalogError) as exc_info:
                await client.fetch_template_id_by_code("N497")

            assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_fetch_variants(self, client):
        """Test variants are parsed with missing numbers defaulted."""
        mock_response = _response(
            200,
            {
                "Id": 1234,
                "ProductVariants": [
                    {
                        "Id": 501,
                        "DefaultCode": "N497D28",
                        "ListPrice": 320000,
                        "QtyAvailable": 4,
                        "VirtualAvailable": 6,
                    },
                    {"Id": 502, "DefaultCode": "N497D30", "ListPrice": None},
                ],
            },
        )

        with patch.object(
            client, "_get_client", new_callable=AsyncMock
        ) as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(return_value=mock_response)
            mock_get_client.return_value = mock_http_client

            variants = await client.fetch_variants_by_template_id(1234)

            assert [v.default_code for v in variants] == ["N497D28", "N497D30"]
            assert variants[0].qty_available == 4
            assert variants[0].virtual_available == 6
            assert variants[1].list_price == 0
            assert variants[1].qty_available == 0
            path = mock_http_client.get.await_args.args[0]
            assert path == "/odata/ProductTemplate(1234)"

    @pytest.mark.asyncio
    async def test_fetch_variants_without_variants(self, client):
        """Test a template without variants."""
        with patch.object(
            client, "_get_client", new_callable=AsyncMock
        ) as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(return_value=_response(200, {"Id": 1}))
            mock_get_client.return_value = mock_http_client

            assert await client.fetch_variants_by_template_id(1) == []

    @pytest.mark.asyncio
    async def test_fetch_variants_unknown_template(self, client):
        """Test an unknown template surfaces as an error."""
        with patch.object(
            client, "_get_client", new_callable=AsyncMock
        ) as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(return_value=_response(404))
            mock_get_client.return_value = mock_http_client

            with pytest.raises(RemoteCatalogError) as exc_info:
                await client.fetch_variants_by_template_id(9)

            assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_request_error(self, client):
        """Test transport errors are wrapped and chained."""
        with patch.object(
            client, "_get_client", new_callable=AsyncMock
        ) as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(
                side_effect=httpx.RequestError("Connection failed")
            )
            mock_get_client.return_value = mock_http_client

            with pytest.raises(RemoteCatalogError) as exc_info:
                await client.fetch_variants_by_template_id(1)

            assert exc_info.value.status_code is None
            assert isinstance(exc_info.value.__cause__, httpx.RequestError)

    @pytest.mark.asyncio
    async def test_context_manager_closes(self):
        """Test the client closes on context exit."""
        async with RemoteCatalogClient(base_url="https://catalog.test") as client:
            await client._get_client()
            assert client._client is not None
        assert client._client is None


class TestTemplateIdCache:
    """Tests for TemplateIdCache."""

    def test_get_and_set(self):
        """Test cached ids are returned."""
        cache = TemplateIdCache(ttl_seconds=60)
        assert cache.get("N497") is None
        cache.set("N497", 1234)
        assert cache.get("N497") == 1234
        assert len(cache) == 1

    def test_entries_expire(self):
        """Test entries older than the TTL are dropped."""
        now = [100.0]
        cache = TemplateIdCache(ttl_seconds=30, clock=lambda: now[0])
        cache.set("N497", 1234)

        now[0] = 130.0
        assert cache.get("N497") == 1234

        now[0] = 130.5
        assert cache.get("N497") is None
        assert len(cache) == 0

    def test_clear(self):
        """Test clearing drops every entry."""
        cache = TemplateIdCache(ttl_seconds=60)
        cache.set("A", 1)
        cache.set("B", 2)
        cache.clear()
        assert len(cache) == 0

    def test_caches_are_independent(self):
        """Test two caches never share entries."""
        first = TemplateIdCache(ttl_seconds=60)
        second = TemplateIdCache(ttl_seconds=60)
        first.set("N497", 1)
        assert second.get("N497") is None

    def test_default_ttl_from_settings(self):
        """Test the default TTL is thirty minutes."""
        assert TemplateIdCache().ttl_seconds == 1800.0
