"""Core components - the catalog and the per-slot selection cache."""

from .catalog import CatalogLoader, ModelCatalog, CATALOG_SIZE
from .selection_cache import SelectionCache, SelectResult, SlotState, Provenance
from .command_router import CommandRouter, CommandAction, CommandArgs

__all__ = [
    'CatalogLoader', 'ModelCatalog', 'CATALOG_SIZE',
    'SelectionCache', 'SelectResult', 'SlotState', 'Provenance',
    'CommandRouter', 'CommandAction', 'CommandArgs',
]
