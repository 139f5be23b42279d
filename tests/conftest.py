"""Shared pytest fixtures and fakes."""

from typing import Dict, List, Optional, Set, Tuple

import pytest

from modelchanger.core.catalog import ModelCatalog
from modelchanger.core.selection_cache import SelectionCache
from modelchanger.errors import ModelApplyError, PreferenceStoreError
from modelchanger.host.base_host import Host, Pawn
from modelchanger.preferences.base_store import PreferenceStore

MODEL_A = "characters/models/alpha/alpha.vmdl"
MODEL_B = "characters/models/bravo/bravo.vmdl"
MODEL_C = "characters/models/charlie/charlie.vmdl"


class FakeHost(Host):
    """Records every host call. Pawns exist only for slots passed to spawn()."""

    def __init__(self):
        self.pawns: Dict[int, Pawn] = {}
        self.precached: List[str] = []
        self.applied: List[Tuple[int, str]] = []
        self.messages: List[Tuple[int, str]] = []
        self.reject_paths: Set[str] = set()

    def spawn(self, slot: int) -> Pawn:
        pawn = Pawn(slot=slot)
        self.pawns[slot] = pawn
        return pawn

    def kill(self, slot: int) -> None:
        self.pawns.pop(slot, None)

    def messages_for(self, slot: int) -> List[str]:
        return [m for s, m in self.messages if s == slot]

    def precache_resource(self, path: str) -> None:
        self.precached.append(path)

    def get_pawn(self, slot: int) -> Optional[Pawn]:
        return self.pawns.get(slot)

    def set_model(self, pawn: Pawn, path: str) -> None:
        if path in self.reject_paths:
            raise ModelApplyError(f"rejected {path}")
        self.applied.append((pawn.slot, path))

    def send_to_recipient(self, slot: int, message: str) -> None:
        self.messages.append((slot, message))


class FakeStore(PreferenceStore):
    """In-memory store where the test decides when an identity finishes loading."""

    def __init__(self):
        super().__init__()
        self.values: Dict[str, Dict[str, str]] = {}
        self.loaded: Set[str] = set()
        self.fail_writes = False
        self.fail_reads = False
        self.load_requests: List[str] = []

    def seed(self, identity, key: str, value: str) -> None:
        self.values.setdefault(str(identity), {})[key] = value

    def finish_load(self, identity) -> None:
        self.loaded.add(str(identity))
        self._notify_loaded(identity)

    def is_loaded(self, identity) -> bool:
        if self.fail_reads:
            raise PreferenceStoreError("store offline")
        return str(identity) in self.loaded

    def get_preference(self, identity, key: str) -> Optional[str]:
        return self.values.get(str(identity), {}).get(key)

    def set_preference(self, identity, key: str, value: str) -> None:
        if self.fail_writes:
            raise PreferenceStoreError("write failed")
        self.seed(identity, key, value)

    def request_load(self, identity) -> None:
        self.load_requests.append(str(identity))

    def unload(self, identity) -> None:
        self.loaded.discard(str(identity))


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def catalog() -> ModelCatalog:
    return ModelCatalog([MODEL_A, MODEL_B, MODEL_C])


@pytest.fixture
def cache(host, store, catalog) -> SelectionCache:
    cache = SelectionCache(host, catalog)
    cache.preferences.attach(store)
    return cache
