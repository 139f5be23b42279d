"""
SocketHost: Host implementation over a Socket.IO bridge.

The game server connects as a Socket.IO client and joins the 'bridge' room.
Outbound host primitives become events emitted to that room; inbound game
events are registered in events.py.
"""

import logging
import threading
from typing import Dict, Optional, Set

from .base_host import Host, Pawn
from ..errors import ModelApplyError

logger = logging.getLogger(__name__)

BRIDGE_ROOM = 'bridge'


class SocketHost(Host):
    def __init__(self, socketio):
        self.socketio = socketio
        self._lock = threading.Lock()
        self._pawns: Dict[int, Pawn] = {}
        self._precached: Set[str] = set()

    # =========================================================================
    # Inbound state reports from the bridge
    # =========================================================================

    def pawn_spawned(self, slot: int) -> Pawn:
        with self._lock:
            pawn = Pawn(slot=slot)
            self._pawns[slot] = pawn
            return pawn

    def pawn_removed(self, slot: int) -> None:
        with self._lock:
            pawn = self._pawns.pop(slot, None)
            if pawn:
                pawn.valid = False

    def reset_precache(self) -> None:
        """Forget registered resources (the engine drops them on map change)."""
        with self._lock:
            self._precached.clear()

    def is_precached(self, path: str) -> bool:
        with self._lock:
            return path in self._precached

    # =========================================================================
    # Host primitives
    # =========================================================================

    def precache_resource(self, path: str) -> None:
        with self._lock:
            self._precached.add(path)
        self.socketio.emit('precache_resource', {'path': path}, to=BRIDGE_ROOM)

    def get_pawn(self, slot: int) -> Optional[Pawn]:
        with self._lock:
            pawn = self._pawns.get(slot)
        if pawn is None or not pawn.is_valid():
            return None
        return pawn

    def set_model(self, pawn: Pawn, path: str) -> None:
        if pawn is None or not pawn.is_valid():
            raise ModelApplyError("Pawn is not valid")
        if not path or not path.strip():
            raise ModelApplyError("Model path is empty")
        if not self.is_precached(path):
            raise ModelApplyError(f"Model {path} was not precached")

        self.socketio.emit('set_model', {'slot': pawn.slot, 'path': path}, to=BRIDGE_ROOM)

    def send_to_recipient(self, slot: int, message: str) -> None:
        try:
            self.socketio.emit('chat_message', {'slot': slot, 'message': message}, to=BRIDGE_ROOM)
        except Exception as e:
            logger.warning(f"Failed to send chat message to slot {slot}: {e}")
