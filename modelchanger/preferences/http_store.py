"""
HttpPreferenceStore: client for a remote key-value preference service.

    GET {base_url}/preferences/<identity>  -> {"<key>": "<value>", ...}
    PUT {base_url}/preferences/<identity>  <- {"key": "<key>", "value": "<value>"}
"""

import logging
import threading
from typing import Dict, Optional

import requests

from .base_store import PreferenceStore

logger = logging.getLogger(__name__)


class HttpPreferenceStore(PreferenceStore):
    """
    Remote preference store.

    request_load() fetches on a daemon thread and notifies listeners when the
    response arrives. set_preference() updates the local copy, then sends the
    PUT on a daemon thread; failures are logged, never raised.

    Values written during a connection stay as an overlay until unload(), so a
    fetch answered before the PUT landed cannot bring back the old value.
    """

    REQUEST_TIMEOUT_SECONDS = 3

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 background: bool = True):
        super().__init__()
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.background = background

        self._lock = threading.RLock()
        self._values: Dict[str, Dict[str, str]] = {}
        self._written: Dict[str, Dict[str, str]] = {}

    def _url(self, identity: str) -> str:
        return f"{self.base_url}/preferences/{identity}"

    def _run(self, target, *args) -> None:
        if not self.background:
            target(*args)
            return

        thread = threading.Thread(target=target, args=args, daemon=True)
        thread.start()

    def is_loaded(self, identity) -> bool:
        with self._lock:
            return self.normalize_identity(identity) in self._values

    def get_preference(self, identity, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(self.normalize_identity(identity), {}).get(key)

    def set_preference(self, identity, key: str, value: str) -> None:
        identity = self.normalize_identity(identity)
        with self._lock:
            self._written.setdefault(identity, {})[key] = value
            if identity in self._values:
                self._values[identity][key] = value

        self._run(self._put, identity, key, value)

    def request_load(self, identity) -> None:
        self._run(self._fetch, self.normalize_identity(identity))

    def unload(self, identity) -> None:
        identity = self.normalize_identity(identity)
        with self._lock:
            self._values.pop(identity, None)
            self._written.pop(identity, None)

    def _put(self, identity: str, key: str, value: str) -> None:
        try:
            response = self.session.put(
                self._url(identity),
                json={'key': key, 'value': value},
                timeout=self.REQUEST_TIMEOUT_SECONDS
            )
        except requests.RequestException as e:
            logger.warning(f"Preference write for {identity} failed: {e}")
            return

        if response.status_code >= 400:
            logger.warning(f"Preference write for {identity} failed: HTTP {response.status_code}")
            return

        logger.debug(f"Preference {key} saved for {identity}")

    def _fetch(self, identity: str) -> None:
        try:
            response = self.session.get(self._url(identity), timeout=self.REQUEST_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            logger.warning(f"Failed to load preferences for {identity}: {e}")
            return

        if response.status_code == 404:
            values = {}
        elif response.status_code != 200:
            logger.warning(f"Failed to load preferences for {identity}: HTTP {response.status_code}")
            return
        else:
            try:
                data = response.json()
            except ValueError as e:
                logger.warning(f"Invalid preferences payload for {identity}: {e}")
                return
            if not isinstance(data, dict):
                logger.warning(f"Invalid preferences payload for {identity}: expected an object")
                return
            values = {str(k): str(v) for k, v in data.items() if v is not None}

        with self._lock:
            values.update(self._written.get(identity, {}))
            self._values[identity] = values

        logger.debug(f"Preferences loaded for {identity}")
        self._notify_loaded(identity)
