"""
CommandRouter: routes player chat/console commands to their handlers.
"""

import logging
from enum import Enum
from typing import Dict, List

from .catalog import display_name
from .selection_cache import SelectionCache, format_chat

logger = logging.getLogger(__name__)

# Chat triggers the host strips before dispatch ('!model 3', '/model 3', '.model 3')
COMMAND_TRIGGERS = ('!', '/', '.')

USAGE_MODEL = "Usage: model <index>"


class CommandAction(Enum):
    CONTINUE = "CONTINUE"
    STOPPED = "STOPPED"


class CommandArgs:
    """
    A parsed command line. Argument 0 is the command name.

    get_arg() raises IndexError for missing arguments, like the host's own
    argument accessor.
    """

    def __init__(self, raw: str):
        self.raw = raw or ''
        text = self.raw.strip()
        if text[:1] in COMMAND_TRIGGERS:
            text = text[1:]
        self._args: List[str] = text.split()

    @property
    def name(self) -> str:
        return self._args[0].lower() if self._args else ''

    @property
    def arg_count(self) -> int:
        return max(0, len(self._args) - 1)

    def get_arg(self, index: int) -> str:
        if index < 0:
            raise IndexError(index)
        return self._args[index]


class CommandRouter:
    """
    Maps command names to handler methods.

    Class Attributes:
        COMMANDS: Mapping of command_name -> handler_method_name
    """

    COMMANDS: Dict[str, str] = {
        'model': 'handle_model',
        'modellist': 'handle_model_list',
    }

    def __init__(self, cache: SelectionCache):
        self.cache = cache
        self.host = cache.host
        self._installed: Dict[str, str] = {}

    def install(self, command_name: str) -> bool:
        handler_name = self.COMMANDS.get(command_name)
        if not handler_name:
            logger.warning(f"No handler for command '{command_name}'. Skipping.")
            return False
        self._installed[command_name] = handler_name
        logger.debug(f"Installed command: {command_name}")
        return True

    def remove(self, command_name: str) -> None:
        self._installed.pop(command_name, None)

    def installed_commands(self) -> List[str]:
        return list(self._installed.keys())

    def dispatch(self, slot: int, raw_command: str) -> CommandAction:
        """
        Route a command line from the player in slot.

        Unknown commands are passed on to the host. Handled commands always stop
        further processing, even if the handler fails.
        """
        args = CommandArgs(raw_command)
        handler_name = self._installed.get(args.name)
        if not handler_name:
            return CommandAction.CONTINUE

        try:
            handler = getattr(self, handler_name)
            return handler(slot, args)
        except Exception as e:
            logger.exception(f"Error handling command {args.name} for slot {slot}: {e}")
            return CommandAction.STOPPED

    def _reply(self, slot: int, text: str) -> None:
        self.host.send_to_recipient(slot, format_chat(text))

    # =========================================================================
    # Command handlers
    # =========================================================================

    def handle_model(self, slot: int, args: CommandArgs) -> CommandAction:
        """model <index>: select a catalog entry and apply it now."""
        pawn = self.host.get_pawn(slot)
        if pawn is None or not pawn.is_valid():
            self._reply(slot, "Player is not valid")
            return CommandAction.STOPPED

        try:
            client_arg = args.get_arg(1)
        except IndexError:
            self._reply(slot, USAGE_MODEL)
            return CommandAction.STOPPED

        try:
            index = int(client_arg)
        except ValueError:
            self._reply(slot, "Invalid index or model not found")
            return CommandAction.STOPPED

        result = self.cache.select(slot, index)
        if not result.success:
            self._reply(slot, result.message)
            return CommandAction.STOPPED

        short_name = display_name(result.path)
        if result.applied:
            self._reply(slot, f"Change model into {short_name}")
        else:
            self._reply(slot, f"Failed to apply model '{short_name}'. See server log.")

        return CommandAction.STOPPED

    def handle_model_list(self, slot: int, args: CommandArgs) -> CommandAction:
        """modellist: print every selectable catalog entry."""
        listing = self.cache.catalog.listing()
        if not listing:
            self._reply(slot, "No models available")
            return CommandAction.STOPPED

        self._reply(slot, "Available Models : ")
        for index, short_name in listing:
            self._reply(slot, f"{index} : {short_name}")

        return CommandAction.STOPPED
