"""
PreferenceLink: the optional connection to a preference store.

The store may come and go at runtime (module loaded/unloaded). Consumers read
link.store and must treat None as "unavailable".
"""

import logging
from typing import Optional

from .base_store import LoadCallback, PreferenceStore, Subscription

logger = logging.getLogger(__name__)


class PreferenceLink:
    def __init__(self, on_load: LoadCallback):
        self._on_load = on_load
        self._store: Optional[PreferenceStore] = None
        self._subscription: Optional[Subscription] = None

    @property
    def store(self) -> Optional[PreferenceStore]:
        return self._store

    @property
    def available(self) -> bool:
        return self._store is not None

    def attach(self, store: PreferenceStore) -> None:
        """Use store and subscribe to its load notifications exactly once."""
        self.detach()
        self._store = store
        self._subscription = store.listen_on_load(self._on_load)
        logger.info(f"Preference store attached: {type(store).__name__}")

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.dispose()
            self._subscription = None
        if self._store is not None:
            logger.info(f"Preference store detached: {type(self._store).__name__}")
        self._store = None
