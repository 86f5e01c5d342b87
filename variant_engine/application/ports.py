"""Collaborator interfaces used by the application services.

The remote catalog and the local store are implemented in the
infrastructure layer; services depend only on these protocols.
"""

from typing import Any, Protocol

from variant_engine.domain.models import LocalVariant, RemoteVariant


class RemoteCatalog(Protocol):
    """Read access to the authoritative remote catalog."""

    async def fetch_template_id_by_code(self, code: str) -> int | None:
        """Find the remote template id of a product code."""
        ...

    async def fetch_variants_by_template_id(self, template_id: int) -> list[RemoteVariant]:
        """Fetch the variants of a remote template."""
        ...


class LocalStore(Protocol):
    """Local product storage.

    ``update_variant`` raises PerItemUpdateError when one write fails.
    """

    async def read_product_by_code(self, code: str) -> LocalVariant | None:
        """Get a product by its code."""
        ...

    async def read_variants_by_base_code(self, code: str) -> list[LocalVariant]:
        """Get the variants of a parent product."""
        ...

    async def read_codes_by_base_code(self, code: str) -> set[str]:
        """Get every code taken under a parent product."""
        ...

    async def update_variant(self, variant_id: int, fields: dict[str, Any]) -> None:
        """Write fields to one product row."""
        ...
