"""
Base preference store interface.

A preference store holds per-identity string values under named keys.
It may load an identity's values asynchronously and notify listeners
once they are available.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

LoadCallback = Callable[[str], None]


class Subscription:
    """Handle returned by listen_on_load. dispose() removes the listener."""

    def __init__(self, store: 'PreferenceStore', callback: LoadCallback):
        self._store = store
        self._callback = callback
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self._store._remove_listener(self._callback)
        self.disposed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.dispose()


class PreferenceStore(ABC):
    """
    Abstract base class for preference stores.

    Subclasses implement:
    - is_loaded(): Whether an identity's values are available
    - get_preference(): Read a value (None if absent)
    - set_preference(): Write a value
    - request_load(): Start loading an identity's values

    Listener bookkeeping is shared: subclasses call _notify_loaded() once an
    identity finishes loading.
    """

    NAME = "ClientPreferences"

    def __init__(self):
        self._listeners: List[LoadCallback] = []
        self._listeners_lock = threading.Lock()

    @staticmethod
    def normalize_identity(identity) -> str:
        return str(identity)

    @abstractmethod
    def is_loaded(self, identity) -> bool:
        pass

    @abstractmethod
    def get_preference(self, identity, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_preference(self, identity, key: str, value: str) -> None:
        pass

    @abstractmethod
    def request_load(self, identity) -> None:
        pass

    def unload(self, identity) -> None:
        """Forget an identity's cached values. Default is a no-op."""

    def listen_on_load(self, callback: LoadCallback) -> Subscription:
        with self._listeners_lock:
            self._listeners.append(callback)
        return Subscription(self, callback)

    def _remove_listener(self, callback: LoadCallback) -> None:
        with self._listeners_lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def _notify_loaded(self, identity) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)

        identity = self.normalize_identity(identity)
        for callback in listeners:
            try:
                callback(identity)
            except Exception as e:
                logger.exception(f"Preference load listener failed for {identity}: {e}")
