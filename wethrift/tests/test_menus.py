"""
test_menus.py — audit of the menu table.

Every option a screen offers must have a transition, and every transition
must lead somewhere the engine can render.
"""
from __future__ import annotations

import pytest

from wethrift.ussd.menus import (
    MENUS,
    TRANSITIONS,
    WELCOME_MENU,
    ListAction,
    TransitionKind,
    lookup,
)
from wethrift.ussd.rendering import RENDERERS
from wethrift.ussd.schemas import MenuLevel


def _option_keys(level: MenuLevel) -> set[str]:
    return {option.split(".", 1)[0] for option in MENUS[level].options}


@pytest.mark.parametrize("level", list(MENUS))
def test_every_offered_option_has_a_transition(level) -> None:
    table_keys = {key for (lvl, key) in TRANSITIONS if lvl == level}
    assert table_keys == _option_keys(level)


@pytest.mark.parametrize("level", list(MENUS))
def test_every_menu_offers_a_way_back(level) -> None:
    assert (level, "0") in TRANSITIONS


def test_auth_is_not_table_driven() -> None:
    assert MenuLevel.auth not in MENUS
    assert all(level != MenuLevel.auth for (level, _key) in TRANSITIONS)


def test_transitions_are_complete() -> None:
    for (level, key), transition in TRANSITIONS.items():
        assert isinstance(transition.next_level, MenuLevel), (level, key)
        if transition.kind is TransitionKind.menu:
            assert transition.menu in MENUS, (level, key)
        elif transition.kind is TransitionKind.action:
            assert transition.action in RENDERERS, (level, key)
        elif transition.kind is TransitionKind.prompt:
            assert transition.prompt is not None and transition.text, (level, key)
        else:
            assert transition.text, (level, key)


def test_every_list_action_has_a_renderer() -> None:
    assert set(RENDERERS) == set(ListAction)


def test_only_exit_ends_the_dialog() -> None:
    ending = [key for key, t in TRANSITIONS.items() if t.kind is TransitionKind.end]
    assert ending == [(MenuLevel.main, "0")]


def test_render_with_and_without_title() -> None:
    dashboard = MENUS[MenuLevel.dashboard]
    assert dashboard.render() == (
        "Dashboard\n\n1. My Groups\n2. Savings\n3. Loans\n4. Contributions\n"
        "5. Escrow\n6. Complaints\n0. Back"
    )
    assert dashboard.render(with_title=False) == dashboard.options_block


def test_render_invalid() -> None:
    assert MENUS[MenuLevel.escrow].render_invalid() == (
        "Invalid option. Please try again.\n\n1. View Transactions\n2. Create Transaction\n0. Back"
    )


def test_welcome_menu_is_a_template() -> None:
    assert WELCOME_MENU.render() == "Welcome to {service_name}\n\n1. Login\n2. Register\n3. Help\n0. Exit"


def test_lookup_trims_keystroke() -> None:
    assert lookup(MenuLevel.dashboard, " 3 ") is TRANSITIONS[(MenuLevel.dashboard, "3")]
    assert lookup(MenuLevel.dashboard, "7") is None
