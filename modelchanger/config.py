"""
Runtime settings: environment variables, overridden by command line flags.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_PORT = 13371


@dataclass
class Settings:
    data_dir: Path
    manifest_path: Path
    asset_root: Optional[Path] = None
    preferences_url: Optional[str] = None
    port: int = DEFAULT_PORT
    debug: bool = True


def default_manifest_path(data_dir) -> Path:
    return Path(data_dir) / "PlayerModelChanger" / "model-list.json"


def load_settings(args=None, environ=None) -> Settings:
    """
    Build Settings from environment variables and parsed CLI args.

    Environment variables:
        MODELCHANGER_DATA_DIR        - data directory (default: data)
        MODELCHANGER_MANIFEST        - model-list.json path
        MODELCHANGER_ASSET_ROOT      - directory holding compiled models
        MODELCHANGER_PREFERENCES_URL - remote preference service base URL
    """
    environ = os.environ if environ is None else environ

    data_dir = environ.get('MODELCHANGER_DATA_DIR', 'data')
    manifest = environ.get('MODELCHANGER_MANIFEST', '')
    asset_root = environ.get('MODELCHANGER_ASSET_ROOT', '')
    preferences_url = environ.get('MODELCHANGER_PREFERENCES_URL', '')
    port = DEFAULT_PORT
    debug = True

    # CLI args override env vars
    if args is not None:
        if getattr(args, 'data_dir', None):
            data_dir = args.data_dir
        if getattr(args, 'manifest', None):
            manifest = args.manifest
        if getattr(args, 'asset_root', None):
            asset_root = args.asset_root
        if getattr(args, 'preferences_url', None):
            preferences_url = args.preferences_url
        if getattr(args, 'port', None):
            port = args.port
        if getattr(args, 'no_debug', False):
            debug = False

    settings = Settings(
        data_dir=Path(data_dir),
        manifest_path=Path(manifest) if manifest else default_manifest_path(data_dir),
        asset_root=Path(asset_root) if asset_root else None,
        preferences_url=preferences_url or None,
        port=port,
        debug=debug
    )

    if settings.asset_root is not None and not settings.asset_root.is_dir():
        logger.warning(f"Asset root {settings.asset_root} does not exist; every model will be skipped at precache.")

    return settings
