"""Tests for the model and modellist commands."""

import pytest

from modelchanger.core.command_router import CommandAction, CommandArgs, CommandRouter
from modelchanger.core.catalog import ModelCatalog
from modelchanger.core.selection_cache import PREFERENCE_KEY
from tests.conftest import MODEL_A, MODEL_B

STEAM_1 = "76561198000000001"


@pytest.fixture
def router(cache) -> CommandRouter:
    router = CommandRouter(cache)
    for name in CommandRouter.COMMANDS:
        router.install(name)
    return router


@pytest.fixture
def player(cache, host) -> int:
    cache.on_connect(0, STEAM_1, "alice")
    host.spawn(0)
    return 0


def test_command_args_parsing() -> None:
    args = CommandArgs("!Model  12 extra")

    assert args.name == "model"
    assert args.arg_count == 2
    assert args.get_arg(1) == "12"
    with pytest.raises(IndexError):
        args.get_arg(5)


def test_model_command_selects_and_reports(router, cache, host, store, player) -> None:
    action = router.dispatch(player, "model 1")

    assert action == CommandAction.STOPPED
    assert cache.get_selection(player) == MODEL_B
    assert store.get_preference(STEAM_1, PREFERENCE_KEY) == MODEL_B
    assert host.applied == [(player, MODEL_B)]
    assert host.messages_for(player) == ["[PlayerModelChanger] Change model into bravo"]


@pytest.mark.parametrize("command", ["model", "model    "])
def test_model_command_without_argument_prints_usage(router, host, player, command) -> None:
    action = router.dispatch(player, command)

    assert action == CommandAction.STOPPED
    assert host.messages_for(player) == ["[PlayerModelChanger] Usage: model <index>"]


@pytest.mark.parametrize("argument", ["abc", "65", "99", "-1", "10"])
def test_model_command_rejects_bad_index(router, cache, host, player, argument) -> None:
    action = router.dispatch(player, f"model {argument}")

    assert action == CommandAction.STOPPED
    assert cache.get_selection(player) is None
    assert host.applied == []
    assert host.messages_for(player) == ["[PlayerModelChanger] Invalid index or model not found"]


def test_model_command_without_pawn(router, cache, host) -> None:
    cache.on_connect(2, STEAM_1)

    action = router.dispatch(2, "model 0")

    assert action == CommandAction.STOPPED
    assert cache.get_selection(2) is None
    assert host.messages_for(2) == ["[PlayerModelChanger] Player is not valid"]


def test_model_command_reports_apply_failure(router, cache, host, player) -> None:
    host.reject_paths.add(MODEL_A)

    router.dispatch(player, "model 0")

    assert cache.get_selection(player) == MODEL_A
    assert "Failed to apply model 'alpha'" in host.messages_for(player)[0]


def test_model_list_enumerates_non_empty_entries(router, cache, host, player) -> None:
    cache.catalog = ModelCatalog(["a/first.vmdl", "", "c/third.vmdl"])

    action = router.dispatch(player, "modellist")

    assert action == CommandAction.STOPPED
    assert host.messages_for(player) == [
        "[PlayerModelChanger] Available Models : ",
        "[PlayerModelChanger] 0 : first",
        "[PlayerModelChanger] 2 : third",
    ]


def test_model_list_with_empty_catalog(router, cache, host, player) -> None:
    cache.catalog = ModelCatalog()

    router.dispatch(player, "modellist")

    assert host.messages_for(player) == ["[PlayerModelChanger] No models available"]


def test_unknown_command_continues(router, host, player) -> None:
    assert router.dispatch(player, "kill") == CommandAction.CONTINUE
    assert router.dispatch(player, "") == CommandAction.CONTINUE
    assert host.messages == []


def test_removed_command_is_not_handled(router, player) -> None:
    router.remove("model")

    assert router.dispatch(player, "model 0") == CommandAction.CONTINUE
    assert router.installed_commands() == ["modellist"]


def test_handler_error_still_stops(router, cache, player, monkeypatch) -> None:
    def boom(slot, index):
        raise RuntimeError("boom")

    monkeypatch.setattr(cache, "select", boom)

    assert router.dispatch(player, "model 0") == CommandAction.STOPPED


def test_install_unknown_command_is_rejected(cache) -> None:
    router = CommandRouter(cache)

    assert not router.install("teleport")
    assert router.installed_commands() == []
