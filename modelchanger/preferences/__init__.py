"""Preference stores - where a player's default model survives reconnects."""

from .base_store import PreferenceStore, Subscription
from .file_store import JsonPreferenceStore
from .http_store import HttpPreferenceStore
from .link import PreferenceLink

__all__ = ['PreferenceStore', 'Subscription', 'JsonPreferenceStore', 'HttpPreferenceStore', 'PreferenceLink']
