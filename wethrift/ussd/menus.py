"""
menus.py — the USSD menu state machine, expressed as data.

MENUS holds the option list shown at each menu level; TRANSITIONS maps
(level, keystroke) to what happens next. Every reachable state/transition
pair is listed here, so the table can be audited and tested directly.

Texts may contain {service_name}, {support_phone} and {support_email};
the engine fills them from settings.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from wethrift.ussd.schemas import MenuLevel, PromptKind, SessionProgress

INVALID_OPTION_PREFIX = "Invalid option. Please try again."


@dataclass(frozen=True)
class Menu:
    options: tuple[str, ...]
    title: Optional[str] = None

    @property
    def options_block(self) -> str:
        return "\n".join(self.options)

    def render(self, with_title: bool = True) -> str:
        if self.title and with_title:
            return f"{self.title}\n\n{self.options_block}"
        return self.options_block

    def render_invalid(self) -> str:
        return f"{INVALID_OPTION_PREFIX}\n\n{self.options_block}"


@dataclass(frozen=True)
class Reply:
    """
    One turn's outcome: text for the gateway plus the session changes to store.

    progress replaces the session context (None clears it). user_id, when set,
    logs the dialog in as that member; group_id, when set, becomes the
    session's selected group.
    """
    message: str
    next_level: MenuLevel
    should_end: bool = False
    progress: Optional[SessionProgress] = None
    user_id: Optional[str] = None
    group_id: Optional[str] = None


class TransitionKind(str, Enum):
    menu = "menu"        # show a menu's options
    text = "text"        # show a fixed text
    prompt = "prompt"    # show a fixed text and capture the next input as free text
    action = "action"    # run a list renderer
    end = "end"          # show a fixed text and terminate the dialog


class ListAction(str, Enum):
    groups = "groups"
    savings = "savings"
    loans = "loans"
    contributions = "contributions"
    escrow = "escrow"
    complaints = "complaints"


@dataclass(frozen=True)
class Transition:
    kind: TransitionKind
    next_level: MenuLevel
    menu: Optional[MenuLevel] = None
    with_title: bool = True
    text: Optional[str] = None
    action: Optional[ListAction] = None
    prompt: Optional[PromptKind] = None


# ---------------------------------------------------------------------------
# Menus
# ---------------------------------------------------------------------------

WELCOME_MENU = Menu(
    title="Welcome to {service_name}",
    options=("1. Login", "2. Register", "3. Help", "0. Exit"),
)

MENUS: dict[MenuLevel, Menu] = {
    MenuLevel.main: Menu(options=("1. Dashboard", "2. Groups", "3. Help", "0. Exit")),
    MenuLevel.dashboard: Menu(
        title="Dashboard",
        options=(
            "1. My Groups",
            "2. Savings",
            "3. Loans",
            "4. Contributions",
            "5. Escrow",
            "6. Complaints",
            "0. Back",
        ),
    ),
    MenuLevel.groups: Menu(
        title="Groups",
        options=("1. Join Group", "2. Create Group", "3. My Groups", "0. Back"),
    ),
    MenuLevel.savings: Menu(
        title="Savings",
        options=("1. View Savings", "2. Create Savings Goal", "3. Make Contribution", "0. Back"),
    ),
    MenuLevel.loans: Menu(
        title="Loans",
        options=("1. View Loans", "2. Apply for Loan", "3. Make Repayment", "0. Back"),
    ),
    MenuLevel.contributions: Menu(
        title="Contributions",
        options=("1. View History", "2. Schedule Contribution", "0. Back"),
    ),
    MenuLevel.escrow: Menu(
        title="Escrow",
        options=("1. View Transactions", "2. Create Transaction", "0. Back"),
    ),
    MenuLevel.complaints: Menu(
        title="Complaints",
        options=("1. View Complaints", "2. Submit Complaint", "0. Back"),
    ),
}


# ---------------------------------------------------------------------------
# Auth sub-flow texts (the auth level is driven by SessionProgress, not the table)
# ---------------------------------------------------------------------------

ENTER_PHONE = "Please enter your phone number:"
INVALID_PHONE = "Please enter a valid phone number:"
ENTER_PIN = "Please enter your 6-digit PIN:"
INVALID_PIN_FORMAT = "PIN must be 6 digits. Please try again:"
AUTH_FAILED_OPTIONS = "1. Login\n2. Register\n0. Back"
INVALID_CREDENTIALS = f"Invalid credentials. Please try again:\n\n{AUTH_FAILED_OPTIONS}"
TOO_MANY_ATTEMPTS = "Too many failed attempts. Please try again later."
INVALID_INPUT = "Invalid input. Please try again."
LOGIN_SUCCESS_TITLE = "Welcome back!"
LOGIN_REQUIRED = "Please login first."
REGISTER_INFO = (
    "Register\n\nSign up on the {service_name} app or web portal, "
    "then set your USSD PIN in Settings.\n\n0. Back"
)
HELP_TEXT = "Help\n\nFor support, call {support_phone}\nOr email {support_email}\n\n0. Back"
GOODBYE = "Thank you for using {service_name}!"
GENERIC_ERROR = "Sorry, an error occurred. Please try again later."


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------

def _menu(level: MenuLevel, with_title: bool = True) -> Transition:
    return Transition(TransitionKind.menu, next_level=level, menu=level, with_title=with_title)


def _text(text: str, level: MenuLevel) -> Transition:
    return Transition(TransitionKind.text, next_level=level, text=text)


def _list(action: ListAction, level: MenuLevel) -> Transition:
    return Transition(TransitionKind.action, next_level=level, action=action)


_BACK_TO_MAIN = _menu(MenuLevel.main, with_title=False)
_BACK_TO_DASHBOARD = _menu(MenuLevel.dashboard, with_title=False)

TRANSITIONS: dict[tuple[MenuLevel, str], Transition] = {
    # main (authenticated; the unauthenticated case short-circuits in the engine)
    (MenuLevel.main, "1"): _menu(MenuLevel.dashboard),
    (MenuLevel.main, "2"): _menu(MenuLevel.groups),
    (MenuLevel.main, "3"): _text(HELP_TEXT, MenuLevel.main),
    (MenuLevel.main, "0"): Transition(TransitionKind.end, next_level=MenuLevel.main, text=GOODBYE),

    # dashboard
    (MenuLevel.dashboard, "1"): _list(ListAction.groups, MenuLevel.groups),
    (MenuLevel.dashboard, "2"): _menu(MenuLevel.savings),
    (MenuLevel.dashboard, "3"): _menu(MenuLevel.loans),
    (MenuLevel.dashboard, "4"): _menu(MenuLevel.contributions),
    (MenuLevel.dashboard, "5"): _menu(MenuLevel.escrow),
    (MenuLevel.dashboard, "6"): _menu(MenuLevel.complaints),
    (MenuLevel.dashboard, "0"): _BACK_TO_MAIN,

    # groups
    (MenuLevel.groups, "1"): Transition(
        TransitionKind.prompt,
        next_level=MenuLevel.groups,
        text="Enter group invite code:",
        prompt=PromptKind.join_group,
    ),
    (MenuLevel.groups, "2"): Transition(
        TransitionKind.prompt,
        next_level=MenuLevel.groups,
        text="Create Group\n\nEnter group name:",
        prompt=PromptKind.create_group,
    ),
    (MenuLevel.groups, "3"): _list(ListAction.groups, MenuLevel.groups),
    (MenuLevel.groups, "0"): _BACK_TO_MAIN,

    # savings
    (MenuLevel.savings, "1"): _list(ListAction.savings, MenuLevel.savings),
    (MenuLevel.savings, "2"): _text("Create Savings Goal\n\nEnter goal name:", MenuLevel.savings),
    (MenuLevel.savings, "3"): _text("Make Contribution\n\nEnter amount:", MenuLevel.contributions),
    (MenuLevel.savings, "0"): _BACK_TO_DASHBOARD,

    # loans
    (MenuLevel.loans, "1"): _list(ListAction.loans, MenuLevel.loans),
    (MenuLevel.loans, "2"): _text("Apply for Loan\n\nEnter loan amount:", MenuLevel.loans),
    (MenuLevel.loans, "3"): _text("Make Repayment\n\nEnter repayment amount:", MenuLevel.loans),
    (MenuLevel.loans, "0"): _BACK_TO_DASHBOARD,

    # contributions
    (MenuLevel.contributions, "1"): _list(ListAction.contributions, MenuLevel.contributions),
    (MenuLevel.contributions, "2"): _text("Schedule Contribution\n\nEnter amount:", MenuLevel.contributions),
    (MenuLevel.contributions, "0"): _BACK_TO_DASHBOARD,

    # escrow
    (MenuLevel.escrow, "1"): _list(ListAction.escrow, MenuLevel.escrow),
    (MenuLevel.escrow, "2"): _text("Create Escrow Transaction\n\nEnter seller phone number:", MenuLevel.escrow),
    (MenuLevel.escrow, "0"): _BACK_TO_DASHBOARD,

    # complaints
    (MenuLevel.complaints, "1"): _list(ListAction.complaints, MenuLevel.complaints),
    (MenuLevel.complaints, "2"): _text(
        "Submit Complaint\n\nEnter complaint type:\n1. Transaction\n2. Service\n3. Technical\n4. Other",
        MenuLevel.complaints,
    ),
    (MenuLevel.complaints, "0"): _BACK_TO_DASHBOARD,
}


def lookup(level: MenuLevel, user_input: str) -> Optional[Transition]:
    """Transition for a trimmed keystroke at `level`, or None if the option is unknown."""
    return TRANSITIONS.get((level, user_input.strip()))
