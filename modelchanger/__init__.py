"""Player model changer - per-session model selection with persisted defaults."""

from .plugin import PlayerModelChanger

__all__ = ['PlayerModelChanger']
