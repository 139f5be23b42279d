"""
Player Model Changer - Main Flask Application
Entry point for the game server bridge.
"""

import os
import logging
import argparse
from flask import Flask, jsonify
from flask_socketio import SocketIO

from modelchanger import PlayerModelChanger
from modelchanger.config import Settings, load_settings, DEFAULT_PORT
from modelchanger.host import SocketHost
from modelchanger.preferences import HttpPreferenceStore, JsonPreferenceStore
from events import register_events

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_preference_store(settings: Settings):
    """Remote store when a URL is configured, local JSON file otherwise."""
    if settings.preferences_url:
        logger.info(f"Using remote preference store at {settings.preferences_url}")
        return HttpPreferenceStore(settings.preferences_url)
    return JsonPreferenceStore(data_dir=str(settings.data_dir))


def create_app(settings: Settings):
    """
    Build the Flask app, Socket.IO server and plugin.

    Returns:
        (app, socketio, plugin)
    """
    app = Flask(__name__)
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'player-model-changer')

    socketio = SocketIO(app, cors_allowed_origins="*", async_mode='threading')

    host = SocketHost(socketio)
    plugin = PlayerModelChanger(host, settings.manifest_path, settings.asset_root)
    plugin.init()
    plugin.post_init()

    store = create_preference_store(settings)
    plugin.on_library_connected(store.NAME, store)

    register_events(socketio, plugin, host)

    @app.route('/health')
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'ok',
            'models_count': plugin.catalog.count(),
            'connected_sessions': plugin.cache.connected_count(),
            'preferences_available': plugin.preference_store is not None
        })

    return app, socketio, plugin


# =============================================================================
# MAIN
# =============================================================================

def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Player Model Changer bridge server',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  Every option can also be set via environment variables:

    MODELCHANGER_DATA_DIR        - data directory
    MODELCHANGER_MANIFEST        - model-list.json path
    MODELCHANGER_ASSET_ROOT      - directory holding compiled models (.vmdl_c)
    MODELCHANGER_PREFERENCES_URL - remote preference service base URL

  Command line arguments override environment variables.
        """
    )
    parser.add_argument('--data-dir', type=str, help='Data directory (default: data)')
    parser.add_argument('--manifest', type=str, help='Path to model-list.json')
    parser.add_argument('--asset-root', type=str, help='Directory holding compiled models')
    parser.add_argument('--preferences-url', type=str, help='Remote preference service base URL')
    parser.add_argument(
        '--port',
        type=int,
        default=DEFAULT_PORT,
        help=f'Server port (default: {DEFAULT_PORT})'
    )
    parser.add_argument(
        '--no-debug',
        action='store_true',
        help='Disable debug mode'
    )
    return parser.parse_args()


if __name__ == '__main__':
    settings = load_settings(parse_args())
    app, socketio, plugin = create_app(settings)

    logger.info("Starting Player Model Changer bridge...")
    logger.info(f"Manifest: {settings.manifest_path}")
    logger.info(f"Bridge: ws://<your-ip>:{settings.port}")

    try:
        socketio.run(
            app,
            host='0.0.0.0',
            port=settings.port,
            debug=settings.debug,
            allow_unsafe_werkzeug=True
        )
    finally:
        plugin.shutdown()
