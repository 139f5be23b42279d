"""
JsonPreferenceStore: preferences persisted to a local JSON file.

Layout of preferences.json:
    {"<identity>": {"<key>": "<value>", ...}, ...}
"""

import json
import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Set

from .base_store import PreferenceStore

logger = logging.getLogger(__name__)


class JsonPreferenceStore(PreferenceStore):
    """
    File-backed preference store.

    Loading is synchronous: request_load() marks the identity loaded and
    notifies listeners before returning.
    """

    def __init__(self, data_dir: str = "data"):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.preferences_file = self.data_dir / "preferences.json"

        self._lock = threading.RLock()
        self._values: Dict[str, Dict[str, str]] = {}
        self._loaded: Set[str] = set()

        self._load_file()

    def _load_file(self) -> None:
        """Read preferences.json, falling back to the backup if the main file is corrupted."""
        backup_file = self.preferences_file.with_suffix('.json.bak')
        files_to_try = []

        if self.preferences_file.exists():
            files_to_try.append(('main', self.preferences_file))
        if backup_file.exists():
            files_to_try.append(('backup', backup_file))

        if not files_to_try:
            logger.info("No preferences.json found, starting fresh.")
            return

        for source_name, file_path in files_to_try:
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)

                if not isinstance(data, dict):
                    raise ValueError("root must be an object")

                self._values = {
                    str(identity): {str(k): str(v) for k, v in values.items() if v is not None}
                    for identity, values in data.items()
                    if isinstance(values, dict)
                }

                if source_name == 'backup':
                    logger.warning("Loaded preferences from backup file (main was corrupted)")
                    shutil.copy2(backup_file, self.preferences_file)

                logger.info(f"Loaded preferences for {len(self._values)} identities")
                return

            except (ValueError, RecursionError, OSError) as e:
                logger.error(f"Failed to load {source_name} preferences file: {e}")
                continue

        logger.error("All preference files corrupted, starting fresh.")

    def _save_file(self) -> None:
        """Write preferences.json atomically, keeping the previous file as a backup."""
        backup_file = self.preferences_file.with_suffix('.json.bak')

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(suffix='.tmp', prefix='preferences_', dir=self.data_dir)
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(self._values, f, indent=2)
            except Exception:
                os.unlink(temp_path)
                raise

            if self.preferences_file.exists():
                try:
                    shutil.copy2(self.preferences_file, backup_file)
                except OSError as e:
                    logger.warning(f"Failed to create preferences backup: {e}")

            os.replace(temp_path, self.preferences_file)
            logger.debug("Preferences saved to preferences.json")

        except OSError as e:
            logger.error(f"Failed to save preferences.json: {e}")

    def is_loaded(self, identity) -> bool:
        with self._lock:
            return self.normalize_identity(identity) in self._loaded

    def get_preference(self, identity, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(self.normalize_identity(identity), {}).get(key)

    def set_preference(self, identity, key: str, value: str) -> None:
        with self._lock:
            identity = self.normalize_identity(identity)
            self._values.setdefault(identity, {})[key] = value
            self._save_file()

    def request_load(self, identity) -> None:
        with self._lock:
            self._loaded.add(self.normalize_identity(identity))
        self._notify_loaded(identity)

    def unload(self, identity) -> None:
        with self._lock:
            self._loaded.discard(self.normalize_identity(identity))
