"""Application services for variant planning and sync."""

from variant_engine.application.planning_service import VariantPlan, VariantPlanningService
from variant_engine.application.ports import LocalStore, RemoteCatalog
from variant_engine.application.sync_service import VariantSyncService

__all__ = [
    "LocalStore",
    "RemoteCatalog",
    "VariantPlan",
    "VariantPlanningService",
    "VariantSyncService",
]
