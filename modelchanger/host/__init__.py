"""Host adapters - the game server side of the plugin."""

from .base_host import Host, Pawn, ClientInfo
from .socket_host import SocketHost, BRIDGE_ROOM

__all__ = ['Host', 'Pawn', 'ClientInfo', 'SocketHost', 'BRIDGE_ROOM']
