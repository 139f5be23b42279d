"""
Base host interface.

The host is the game server the plugin runs against. It owns the precache
table, the player pawns and the chat channel. The plugin only talks to it
through this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class Pawn:
    """
    A player's in-world entity.

    Attributes:
        slot: The owning player's slot
        valid: False once the pawn died or its player left
    """
    slot: int
    valid: bool = True

    def is_valid(self) -> bool:
        return self.valid


@dataclass
class ClientInfo:
    """
    A connected client as reported by the host.

    Attributes:
        slot: Player slot (0..64), recycled between connections
        identity: Stable external identity (e.g. SteamID)
        name: Display name
        is_bot: Fake client (bot)
        is_hltv: Spectator relay (HLTV/SourceTV)
    """
    slot: int
    identity: str
    name: str = ''
    is_bot: bool = False
    is_hltv: bool = False

    @property
    def is_fake(self) -> bool:
        return self.is_bot or self.is_hltv


class Host(ABC):
    """
    Abstract base class for host adapters.

    Implementations provide:
    - precache_resource(): Register a resource path for precache
    - get_pawn(): The slot's live pawn, or None
    - set_model(): Apply a model to a pawn, raising ModelApplyError on failure
    - send_to_recipient(): Chat message to one player, never raises
    """

    @abstractmethod
    def precache_resource(self, path: str) -> None:
        pass

    @abstractmethod
    def get_pawn(self, slot: int) -> Optional[Pawn]:
        pass

    @abstractmethod
    def set_model(self, pawn: Pawn, path: str) -> None:
        pass

    @abstractmethod
    def send_to_recipient(self, slot: int, message: str) -> None:
        pass
