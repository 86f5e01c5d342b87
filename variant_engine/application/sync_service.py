"""Variant sync application service.

Orchestrates one sync run for a parent product:
- Resolving the parent's remote template id (stored, cached, or looked up)
- Fetching the authoritative variant set once
- Mirroring price and stock onto local variants, one write at a time
"""

import structlog

from variant_engine.application.ports import LocalStore, RemoteCatalog
from variant_engine.domain.exceptions import (
    ParentProductNotFoundError,
    PerItemUpdateError,
    RemoteTemplateNotFoundError,
)
from variant_engine.domain.models import LocalVariant, SyncResult
from variant_engine.infrastructure.remote_client import TemplateIdCache
from variant_engine.reconciliation.engine import ReconciliationEngine

logger = structlog.get_logger()


class VariantSyncService:
    """Service syncing local variants from the remote catalog.

    Example usage:
        async with RemoteCatalogClient() as remote:
            service = VariantSyncService(remote, VariantRepository(session))
            result = await service.sync_variants("N497")
    """

    def __init__(
        self,
        remote: RemoteCatalog,
        store: LocalStore,
        template_cache: TemplateIdCache | None = None,
        engine: ReconciliationEngine | None = None,
    ) -> None:
        """Initialize service.

        Args:
            remote: Remote catalog client.
            store: Local product store.
            template_cache: Code -> template id cache scoped to this caller.
            engine: Reconciliation engine.
        """
        self.remote = remote
        self.store = store
        self.template_cache = template_cache if template_cache is not None else TemplateIdCache()
        self.engine = engine or ReconciliationEngine()

    async def resolve_template_id(self, parent: LocalVariant) -> int:
        """Resolve the remote template id of a parent product.

        A freshly looked-up id is cached and written back to the parent. A
        failed write-back is logged and does not stop the run.

        Args:
            parent: Locally stored parent product.

        Returns:
            Remote template id.

        Raises:
            RemoteTemplateNotFoundError: If the remote catalog has no template.
            RemoteCatalogError: If the lookup fails.
        """
        if parent.remote_template_id:
            return parent.remote_template_id

        cached = self.template_cache.get(parent.product_code)
        if cached is not None:
            return cached

        logger.info("Looking up remote template id", code=parent.product_code)
        template_id = await self.remote.fetch_template_id_by_code(parent.product_code)
        if template_id is None:
            raise RemoteTemplateNotFoundError(parent.product_code)

        self.template_cache.set(parent.product_code, template_id)
        try:
            await self.store.update_variant(parent.id, {"remote_template_id": template_id})
        except PerItemUpdateError as e:
            logger.warning(
                "Failed to store remote template id",
                code=parent.product_code,
                template_id=template_id,
                error=e.message,
            )
        return template_id

    async def sync_variants(self, parent_code: str) -> SyncResult:
        """Sync the variants of one parent product from the remote catalog.

        Args:
            parent_code: Code of the parent product.

        Returns:
            Sync summary; skipped=1 when either side has no variants.

        Raises:
            ParentProductNotFoundError: If the parent is not stored locally.
            RemoteTemplateNotFoundError: If the parent is not in the remote catalog.
            RemoteCatalogError: If fetching from the remote catalog fails.
        """
        parent = await self.store.read_product_by_code(parent_code)
        if parent is None:
            raise ParentProductNotFoundError(parent_code)

        template_id = await self.resolve_template_id(parent)

        remote_variants = await self.remote.fetch_variants_by_template_id(template_id)
        if not remote_variants:
            logger.info(
                "Remote template has no variants",
                code=parent_code,
                template_id=template_id,
            )
            return SyncResult(skipped=1)

        local_variants = await self.store.read_variants_by_base_code(parent_code)

        logger.info(
            "Syncing variants",
            code=parent_code,
            template_id=template_id,
            local_count=len(local_variants),
            remote_count=len(remote_variants),
        )
        result = await self.engine.sync_by_code(local_variants, remote_variants, self.store)

        logger.info(
            "Variant sync completed",
            code=parent_code,
            updated=result.updated,
            unchanged=result.unchanged,
            errors=len(result.errors),
        )
        return result
