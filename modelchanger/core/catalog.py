"""
Catalog: the bounded list of selectable model paths.

Loaded once at startup from model-list.json. Entries are contiguous from
index 0 and unused slots hold an empty string.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

CATALOG_SIZE = 65

MANIFEST_FIELD = 'paths'

DEFAULT_TEMPLATE_PATHS = [
    "characters/kianya/vrc/lime_obsidian/limeobsidian.vmdl",
    "characters/models/kianya/vrc/chiffon_marshmallow/chiffon_marshmallow.vmdl",
]

# Editable source extension -> compiled artifact extension on disk
SOURCE_EXTENSION = '.vmdl'
COMPILED_EXTENSION = '.vmdl_c'


def display_name(path: str) -> str:
    """Last path segment without extension. Works with '/' or '\\'."""
    name = path.replace('\\', '/').rsplit('/', 1)[-1]
    return os.path.splitext(name)[0]


def compiled_artifact_path(path: str) -> str:
    """Map a logical model path to the file the engine actually loads."""
    if path.lower().endswith(SOURCE_EXTENSION):
        return path[:-len(SOURCE_EXTENSION)] + COMPILED_EXTENSION
    return path


@dataclass
class CatalogLoadResult:
    entries: List[str]
    warnings: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return sum(1 for entry in self.entries if entry)


@dataclass
class PrecacheReport:
    registered: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class ModelCatalog:
    """
    Immutable view over the loaded catalog entries.

    Index lookups are always defined for 0..CATALOG_SIZE-1; an empty string
    means the slot is unused.
    """

    def __init__(self, entries: Optional[List[str]] = None):
        entries = list(entries or [])[:CATALOG_SIZE]
        entries += [''] * (CATALOG_SIZE - len(entries))
        self._entries: Tuple[str, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> str:
        return self._entries[index]

    @property
    def entries(self) -> Tuple[str, ...]:
        return self._entries

    def get(self, index: int) -> Optional[str]:
        """Return the path at index, or None if out of range or unused."""
        if not 0 <= index < len(self._entries):
            return None
        path = self._entries[index]
        if not path.strip():
            return None
        return path

    def listing(self) -> List[Tuple[int, str]]:
        """(index, short name) for every non-empty entry."""
        return [
            (i, display_name(path))
            for i, path in enumerate(self._entries)
            if path.strip()
        ]

    def count(self) -> int:
        return len(self.listing())


class CatalogLoader:
    """
    Reads model-list.json into a ModelCatalog.

    Never raises: every configuration or filesystem problem is logged,
    recorded as a warning and degrades to an empty or partial catalog.
    """

    def __init__(self, manifest_path, asset_root=None):
        self.manifest_path = Path(manifest_path)
        self.asset_root = Path(asset_root) if asset_root else None

    def load(self) -> CatalogLoadResult:
        result = CatalogLoadResult(entries=[''] * CATALOG_SIZE)

        if not self._ensure_manifest(result):
            return result

        try:
            with open(self.manifest_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (ValueError, RecursionError, OSError) as e:
            self._warn(result, f"Failed to read or parse {self.manifest_path}: {e}", error=True)
            return result

        paths = data.get(MANIFEST_FIELD) if isinstance(data, dict) else None
        if not isinstance(paths, list):
            self._warn(result, f"{self.manifest_path} does not contain a '{MANIFEST_FIELD}' array.")
            return result

        index = 0
        for item in paths:
            if not isinstance(item, str) or not item.strip():
                continue

            if index >= CATALOG_SIZE:
                self._warn(result, f"Catalog capacity ({CATALOG_SIZE}) reached; skipping additional paths.")
                break

            result.entries[index] = item
            index += 1

        logger.info(f"Loaded {index} model paths from {self.manifest_path}")
        return result

    def _ensure_manifest(self, result: CatalogLoadResult) -> bool:
        """Create a template manifest if none exists. False means stop loading."""
        if self.manifest_path.exists():
            return True

        try:
            self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # The write below reports the real failure
            logger.warning(f"Failed to create folder {self.manifest_path.parent}: {e}")

        try:
            with open(self.manifest_path, 'w', encoding='utf-8') as f:
                json.dump({MANIFEST_FIELD: DEFAULT_TEMPLATE_PATHS}, f, indent=2)
            logger.info(f"Created default model-list.json at {self.manifest_path}")
        except OSError as e:
            self._warn(result, f"Failed to create {self.manifest_path}: {e}", error=True)
            return False

        return True

    def precache(self, catalog: ModelCatalog,
                 precache_fn: Callable[[str], object]) -> PrecacheReport:
        """
        Register every verified catalog entry for precache.

        Entries whose compiled artifact is missing stay in the catalog but are
        not registered.
        """
        report = PrecacheReport()
        if self.asset_root is None:
            logger.info("No asset root configured; precaching catalog entries without verification.")

        for path in catalog.entries:
            if not path.strip():
                continue

            if self.asset_root is not None:
                artifact = self.asset_root / compiled_artifact_path(path)
                if not artifact.is_file():
                    report.skipped.append(path)
                    self._warn(report, f"Compiled model not found for {path} (looked for {artifact}); not precaching.")
                    continue

            try:
                precache_fn(path)
            except Exception as e:
                report.skipped.append(path)
                self._warn(report, f"Failed to precache resource {path}: {e}")
                continue

            report.registered.append(path)
            logger.info(f"PrecacheResource ({path})")

        return report

    @staticmethod
    def _warn(target, message: str, error: bool = False) -> None:
        if error:
            logger.error(message)
        else:
            logger.warning(message)
        target.warnings.append(message)
