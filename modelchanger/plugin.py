"""
PlayerModelChanger: plugin lifecycle and host event entry points.

Wires the catalog, the selection cache and the command router together and
exposes the callbacks the host drives.
"""

import logging
from typing import Optional

from .core.catalog import CatalogLoader, ModelCatalog, PrecacheReport
from .core.command_router import CommandAction, CommandRouter
from .core.selection_cache import SelectionCache
from .host.base_host import ClientInfo, Host
from .preferences.base_store import PreferenceStore

logger = logging.getLogger(__name__)

PREFERENCES_MODULE = "ClientPreferences"


class PlayerModelChanger:
    DISPLAY_NAME = "PlayerModelChanger"

    def __init__(self, host: Host, manifest_path, asset_root=None):
        self.host = host
        self.loader = CatalogLoader(manifest_path, asset_root)
        self.cache = SelectionCache(host)
        self.commands = CommandRouter(self.cache)

    @property
    def catalog(self) -> ModelCatalog:
        return self.cache.catalog

    @property
    def preference_store(self) -> Optional[PreferenceStore]:
        return self.cache.preferences.store

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def init(self) -> bool:
        for command_name in CommandRouter.COMMANDS:
            self.commands.install(command_name)
        return True

    def post_init(self) -> ModelCatalog:
        result = self.loader.load()
        self.cache.catalog = ModelCatalog(result.entries)
        logger.info(f"{self.DISPLAY_NAME} ready with {result.count} models ({len(result.warnings)} warnings)")
        return self.cache.catalog

    def shutdown(self) -> None:
        for command_name in CommandRouter.COMMANDS:
            self.commands.remove(command_name)
        self.cache.preferences.detach()
        self.cache.clear()

    def on_resource_precache(self) -> PrecacheReport:
        return self.loader.precache(self.catalog, self.host.precache_resource)

    def on_library_connected(self, name: str, store: PreferenceStore) -> None:
        logger.info(f"Module {name} is loaded.")
        if name.lower() != PREFERENCES_MODULE.lower():
            return
        try:
            self.cache.preferences.attach(store)
        except Exception as e:
            logger.warning(f"Failed to attach {name} when library connected: {e}")

    def on_library_disconnect(self, name: str) -> None:
        if name.lower() == PREFERENCES_MODULE.lower():
            self.cache.preferences.detach()

    # =========================================================================
    # Host events
    # =========================================================================

    def on_client_put_in_server(self, client: ClientInfo) -> None:
        self.cache.on_connect(client.slot, client.identity, client.name, client.is_fake)

    def on_client_disconnect(self, slot: int) -> None:
        self.cache.on_disconnect(slot)

    def on_player_spawn(self, slot: int) -> bool:
        return self.cache.on_entity_spawned(slot)

    def on_client_command(self, slot: int, raw_command: str) -> CommandAction:
        return self.commands.dispatch(slot, raw_command)
