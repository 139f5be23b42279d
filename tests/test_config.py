"""Tests for settings resolution."""

from argparse import Namespace
from pathlib import Path

from modelchanger.config import DEFAULT_PORT, default_manifest_path, load_settings


def test_defaults() -> None:
    settings = load_settings(environ={})

    assert settings.data_dir == Path("data")
    assert settings.manifest_path == Path("data") / "PlayerModelChanger" / "model-list.json"
    assert settings.asset_root is None
    assert settings.preferences_url is None
    assert settings.port == DEFAULT_PORT
    assert settings.debug


def test_environment_values(tmp_path: Path) -> None:
    environ = {
        "MODELCHANGER_DATA_DIR": str(tmp_path),
        "MODELCHANGER_ASSET_ROOT": str(tmp_path),
        "MODELCHANGER_PREFERENCES_URL": "http://prefs.local",
    }

    settings = load_settings(environ=environ)

    assert settings.manifest_path == default_manifest_path(tmp_path)
    assert settings.asset_root == tmp_path
    assert settings.preferences_url == "http://prefs.local"


def test_cli_args_override_environment(tmp_path: Path) -> None:
    environ = {"MODELCHANGER_MANIFEST": "/env/model-list.json"}
    args = Namespace(
        data_dir=None,
        manifest=str(tmp_path / "cli.json"),
        asset_root=None,
        preferences_url=None,
        port=27020,
        no_debug=True,
    )

    settings = load_settings(args, environ=environ)

    assert settings.manifest_path == tmp_path / "cli.json"
    assert settings.port == 27020
    assert not settings.debug
