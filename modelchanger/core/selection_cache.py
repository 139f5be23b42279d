"""
SelectionCache: per-slot model selection.

Three sources write a slot's selection, in no guaranteed order:
- on_connect(): clears the slot, then reads the stored default if the
  preference store already has it
- on_preferences_loaded(): the store finished loading an identity
- select(): the player picked a model with the 'model' command

A selection made with select() is tagged USER and is never overwritten by a
default load until the slot is cleared by the next connect or disconnect.
"""

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional

from .catalog import ModelCatalog, display_name
from ..host.base_host import Host, Pawn
from ..preferences.link import PreferenceLink

logger = logging.getLogger(__name__)

MAX_SLOTS = 65

PREFERENCE_KEY = "PlayerDefaultModel"

CHAT_PREFIX = "[PlayerModelChanger]"


def format_chat(text: str) -> str:
    return f"{CHAT_PREFIX} {text}"


class SlotState(Enum):
    EMPTY = "EMPTY"
    DEFAULT_PENDING = "DEFAULT_PENDING"
    RESOLVED = "RESOLVED"


class Provenance(Enum):
    DEFAULT = "default"
    USER = "user"


@dataclass
class SlotRecord:
    """
    Selection state for one player slot.

    Attributes:
        slot: Player slot index
        identity: Stable identity of the current occupant (None when empty)
        name: Occupant's display name
        is_fake: Bot or HLTV; kept for bookkeeping, skipped on spawn
        state: EMPTY, DEFAULT_PENDING or RESOLVED
        selection: Selected model path (None until resolved)
        provenance: Who wrote the selection
    """
    slot: int
    identity: Optional[str] = None
    name: str = ''
    is_fake: bool = False
    state: SlotState = SlotState.EMPTY
    selection: Optional[str] = None
    provenance: Optional[Provenance] = None


@dataclass
class SelectResult:
    """
    Outcome of select().

    Attributes:
        success: The selection was stored
        code: Failure code (INVALID_SLOT, NOT_CONNECTED, INVALID_PAWN, INVALID_INDEX)
        message: Player-facing text for failures
        path: Selected model path on success
        applied: The model was applied to the current pawn
    """
    success: bool
    code: str = ''
    message: str = ''
    path: Optional[str] = None
    applied: bool = False


class SelectionCache:
    """
    Fixed-capacity slot -> model path cache.

    The in-memory selection is the source of truth for a connection's
    lifetime; the preference store is a best-effort mirror.
    """

    def __init__(self, host: Host, catalog: Optional[ModelCatalog] = None):
        self.host = host
        self.catalog = catalog or ModelCatalog()
        self.preferences = PreferenceLink(self.on_preferences_loaded)

        # Handlers may arrive from socket threads and the store's load thread
        self._lock = threading.RLock()
        self._records: List[SlotRecord] = [SlotRecord(slot=i) for i in range(MAX_SLOTS)]

    @staticmethod
    def _valid_slot(slot) -> bool:
        return isinstance(slot, int) and 0 <= slot < MAX_SLOTS

    # =========================================================================
    # Queries
    # =========================================================================

    def get_record(self, slot: int) -> Optional[SlotRecord]:
        """Snapshot of a slot's record, or None for an invalid slot."""
        if not self._valid_slot(slot):
            return None
        with self._lock:
            return replace(self._records[slot])

    def get_selection(self, slot: int) -> Optional[str]:
        record = self.get_record(slot)
        return record.selection if record else None

    def slot_for_identity(self, identity) -> Optional[int]:
        identity = str(identity)
        with self._lock:
            for record in self._records:
                if record.state != SlotState.EMPTY and record.identity == identity:
                    return record.slot
        return None

    def connected_count(self) -> int:
        with self._lock:
            return sum(1 for r in self._records if r.state != SlotState.EMPTY)

    # =========================================================================
    # Event handlers
    # =========================================================================

    def on_connect(self, slot: int, identity, name: str = '', is_fake: bool = False) -> None:
        """A client took the slot. Clears any previous occupant's selection first."""
        if not self._valid_slot(slot):
            logger.warning(f"Ignoring connect for out-of-range slot {slot}")
            return

        with self._lock:
            record = SlotRecord(
                slot=slot,
                identity=str(identity),
                name=name,
                is_fake=is_fake,
                state=SlotState.DEFAULT_PENDING
            )
            self._records[slot] = record
            self._read_default(record, source='connect')

    def on_preferences_loaded(self, identity) -> None:
        """The preference store finished loading identity. Order relative to connect is not guaranteed."""
        identity = str(identity)
        with self._lock:
            slot = self.slot_for_identity(identity)
            if slot is None:
                logger.debug(f"Preferences loaded for {identity} with no connected slot")
                return
            self._read_default(self._records[slot], source='preferences_loaded')

    def select(self, slot: int, catalog_index: int) -> SelectResult:
        """Player picked a catalog entry. Validates, stores, persists and applies."""
        if not self._valid_slot(slot):
            return SelectResult(False, 'INVALID_SLOT', 'Player is not valid')

        with self._lock:
            record = self._records[slot]
            if record.state == SlotState.EMPTY:
                return SelectResult(False, 'NOT_CONNECTED', 'Player is not valid')

            pawn = self.host.get_pawn(slot)
            if pawn is None or not pawn.is_valid():
                return SelectResult(False, 'INVALID_PAWN', 'Player is not valid')

            path = self.catalog.get(catalog_index) if isinstance(catalog_index, int) else None
            if path is None:
                return SelectResult(False, 'INVALID_INDEX', 'Invalid index or model not found')

            record.selection = path
            record.provenance = Provenance.USER
            record.state = SlotState.RESOLVED
            identity = record.identity
            name = record.name

        self._persist(identity, path)
        applied = self._apply(pawn, path, name)

        logger.info(f"Player {name} (slot {slot}) changed model into ({display_name(path)})")
        return SelectResult(True, path=path, applied=applied)

    def on_entity_spawned(self, slot: int) -> bool:
        """Re-apply the slot's selection to its new pawn. Returns True if a model was applied."""
        if not self._valid_slot(slot):
            return False

        with self._lock:
            record = self._records[slot]
            if record.is_fake or not record.selection:
                return False
            path = record.selection
            name = record.name or '<unknown>'

        pawn = self.host.get_pawn(slot)
        if pawn is None or not pawn.is_valid():
            return False

        short_name = display_name(path)
        if self._apply(pawn, path, name):
            self.host.send_to_recipient(slot, format_chat(f"Applied model: {short_name}"))
            return True

        self.host.send_to_recipient(
            slot,
            format_chat(f"Failed to apply model '{short_name}' for {name}. See server log.")
        )
        return False

    def on_disconnect(self, slot: int) -> None:
        """Client left. Clears the slot; the stored preference is left alone."""
        if not self._valid_slot(slot):
            return
        with self._lock:
            self._records[slot] = SlotRecord(slot=slot)

    def clear(self) -> None:
        with self._lock:
            self._records = [SlotRecord(slot=i) for i in range(MAX_SLOTS)]

    # =========================================================================
    # Internals
    # =========================================================================

    def _read_default(self, record: SlotRecord, source: str) -> None:
        """Adopt the stored default for record if the store has one. Caller holds the lock."""
        store = self.preferences.store
        if store is None:
            return

        try:
            if not store.is_loaded(record.identity):
                return
            value = store.get_preference(record.identity, PREFERENCE_KEY)
        except Exception as e:
            logger.warning(f"Error while reading {PREFERENCE_KEY} for {record.identity}: {e}")
            return

        if value is None or not value.strip():
            return

        if record.provenance == Provenance.USER:
            logger.debug(f"Ignoring stored default for slot {record.slot}; player already chose a model")
            return

        record.selection = value
        record.provenance = Provenance.DEFAULT
        record.state = SlotState.RESOLVED
        logger.info(f"Loaded {PREFERENCE_KEY} for {record.name} (slot {record.slot}) via {source} => {value}")

    def _persist(self, identity: Optional[str], path: str) -> None:
        store = self.preferences.store
        if store is None or identity is None:
            logger.debug(f"No preference store; selection for {identity} lasts this session only")
            return

        try:
            store.set_preference(identity, PREFERENCE_KEY, path)
        except Exception as e:
            logger.warning(f"Failed to save {PREFERENCE_KEY} for {identity}: {e}")

    def _apply(self, pawn: Pawn, path: str, name: str) -> bool:
        try:
            self.host.set_model(pawn, path)
            return True
        except Exception as e:
            logger.warning(f"Failed to SetModel for player {name} (slot {pawn.slot}) with model {path}: {e}")
            return False
