"""
Socket.IO event handlers for the game server bridge.
Translates bridge events into PlayerModelChanger callbacks.
"""

import logging
from flask_socketio import emit, join_room

from modelchanger.host import BRIDGE_ROOM, ClientInfo

logger = logging.getLogger(__name__)

# Global references
plugin = None
host = None
socketio = None


def register_events(sio, pl, h):
    """Register all Socket.IO event handlers."""
    global socketio, plugin, host
    socketio = sio
    plugin = pl
    host = h

    # Bridge connection
    sio.on_event('connect', on_connect)
    sio.on_event('disconnect', on_disconnect)

    # Client lifecycle
    sio.on_event('client_put_in_server', on_client_put_in_server)
    sio.on_event('client_disconnect', on_client_disconnect)
    sio.on_event('client_command', on_client_command)

    # Pawn lifecycle
    sio.on_event('player_spawn', on_player_spawn)
    sio.on_event('player_death', on_player_death)

    # Map load
    sio.on_event('resource_precache', on_resource_precache)

    logger.info("Socket.IO bridge events registered")


def _get_slot(data):
    """Extract an int slot from a payload, or None if missing/malformed."""
    if not isinstance(data, dict):
        return None
    slot = data.get('slot')
    if isinstance(slot, bool) or not isinstance(slot, int):
        return None
    return slot


# =============================================================================
# BRIDGE HANDLERS
# =============================================================================

def on_connect(auth=None):
    join_room(BRIDGE_ROOM)
    logger.info("Game server bridge connected")
    emit('bridge_ready', {'models': plugin.catalog.count()})


def on_disconnect(reason=None):
    # Slots stay as they are; the bridge reports disconnects per client
    logger.info("Game server bridge disconnected")


# =============================================================================
# CLIENT HANDLERS
# =============================================================================

def on_client_put_in_server(data):
    slot = _get_slot(data)
    identity = data.get('identity') if isinstance(data, dict) else None
    if slot is None or identity in (None, ''):
        logger.warning(f"Malformed client_put_in_server payload: {data}")
        return

    client = ClientInfo(
        slot=slot,
        identity=str(identity),
        name=data.get('name', ''),
        is_bot=bool(data.get('is_bot', False)),
        is_hltv=bool(data.get('is_hltv', False))
    )
    plugin.on_client_put_in_server(client)

    store = plugin.preference_store
    if store is not None and not client.is_fake:
        try:
            store.request_load(client.identity)
        except Exception as e:
            logger.warning(f"Failed to request preferences for {client.identity}: {e}")


def on_client_disconnect(data):
    slot = _get_slot(data)
    if slot is None:
        logger.warning(f"Malformed client_disconnect payload: {data}")
        return

    record = plugin.cache.get_record(slot)
    host.pawn_removed(slot)
    plugin.on_client_disconnect(slot)

    store = plugin.preference_store
    if store is not None and record is not None and record.identity:
        try:
            store.unload(record.identity)
        except Exception as e:
            logger.warning(f"Failed to unload preferences for {record.identity}: {e}")


def on_client_command(data):
    slot = _get_slot(data)
    command = data.get('command') if isinstance(data, dict) else None
    if slot is None or not isinstance(command, str):
        logger.warning(f"Malformed client_command payload: {data}")
        return

    action = plugin.on_client_command(slot, command)
    emit('command_result', {
        'slot': slot,
        'command': command,
        'action': action.value
    })


# =============================================================================
# PAWN HANDLERS
# =============================================================================

def on_player_spawn(data):
    slot = _get_slot(data)
    if slot is None:
        logger.warning(f"Malformed player_spawn payload: {data}")
        return

    host.pawn_spawned(slot)
    plugin.on_player_spawn(slot)


def on_player_death(data):
    slot = _get_slot(data)
    if slot is None:
        logger.warning(f"Malformed player_death payload: {data}")
        return

    host.pawn_removed(slot)


# =============================================================================
# PRECACHE HANDLER
# =============================================================================

def on_resource_precache(data=None):
    host.reset_precache()
    report = plugin.on_resource_precache()
    emit('precache_report', {
        'registered': report.registered,
        'skipped': report.skipped,
        'warnings': report.warnings
    })
