"""
rendering.py — list screens for the USSD dialog.

Each renderer issues one read through the directory and turns the rows into a
single screen. Database failures stay inside the dialog ("Error loading X")
and keep the member at the same menu level; anything else propagates to the
engine's top-level handler.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Awaitable, Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError

from wethrift.config import settings
from wethrift.services.savings import total_completed
from wethrift.ussd.menus import LOGIN_REQUIRED, ListAction, Reply
from wethrift.ussd.schemas import MenuLevel, UssdSession

logger = logging.getLogger(__name__)


def format_amount(amount) -> str:
    """₦12,500 for whole amounts, ₦12,500.50 otherwise."""
    value = Decimal(str(amount))
    if value == value.to_integral_value():
        return f"{settings.ussd_currency_symbol}{value:,.0f}"
    return f"{settings.ussd_currency_symbol}{value:,.2f}"


def fit_list(header: str, items: Sequence[str], footer: str, max_length: int | None = None) -> str:
    """
    Numbered list screen: header, blank line, items, blank line, footer.

    Trailing items are dropped until the screen fits within max_length;
    header and footer are always kept.
    """
    limit = max_length or settings.ussd_max_message_length
    lines = [f"{i}. {item}" for i, item in enumerate(items, start=1)]
    while True:
        body = "\n".join(lines)
        message = f"{header}\n\n{body}\n\n{footer}" if lines else f"{header}\n\n{footer}"
        if len(message) <= limit or not lines:
            return message
        lines.pop()


def _login_required() -> Reply:
    return Reply(message=LOGIN_REQUIRED, next_level=MenuLevel.auth)


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

GROUPS_EMPTY = "You are not a member of any groups.\n\n1. Join Group\n2. Create Group\n0. Back"
SAVINGS_FOOTER = "1. Create Savings Goal\n2. Make Contribution\n0. Back"
LOANS_FOOTER = "1. Apply for Loan\n2. Make Repayment\n0. Back"


async def render_groups(session: UssdSession, directory) -> Reply:
    groups = await directory.list_groups(session.user_id)
    if not groups:
        return Reply(message=GROUPS_EMPTY, next_level=MenuLevel.groups)
    return Reply(
        message=fit_list("Your Groups:", [g.name for g in groups], "0. Back"),
        next_level=MenuLevel.groups,
    )


async def render_savings(session: UssdSession, directory) -> Reply:
    contributions = await directory.list_contributions(session.user_id)
    if not contributions:
        return Reply(message=f"No savings found.\n\n{SAVINGS_FOOTER}", next_level=MenuLevel.savings)
    total = total_completed(contributions)
    return Reply(
        message=f"Total Savings: {format_amount(total)}\n\n{SAVINGS_FOOTER}",
        next_level=MenuLevel.savings,
    )


async def render_loans(session: UssdSession, directory) -> Reply:
    loans = await directory.list_loans(session.user_id)
    if not loans:
        return Reply(message=f"No loans found.\n\n{LOANS_FOOTER}", next_level=MenuLevel.loans)
    return Reply(
        message=fit_list(
            "Your Loans:",
            [f"{format_amount(loan.amount)} - {loan.status}" for loan in loans],
            LOANS_FOOTER,
        ),
        next_level=MenuLevel.loans,
    )


async def render_contributions(session: UssdSession, directory) -> Reply:
    contributions = await directory.list_contributions(
        session.user_id, limit=settings.ussd_list_limit
    )
    if not contributions:
        return Reply(
            message="No contributions found.\n\n1. Schedule Contribution\n2. Make Contribution\n0. Back",
            next_level=MenuLevel.contributions,
        )
    return Reply(
        message=fit_list(
            "Recent Contributions:",
            [f"{format_amount(c.amount)} - {c.status}" for c in contributions],
            "1. View All\n2. Schedule Contribution\n0. Back",
        ),
        next_level=MenuLevel.contributions,
    )


async def render_escrow(session: UssdSession, directory) -> Reply:
    transactions = await directory.list_escrow_transactions(
        session.user_id, limit=settings.ussd_list_limit
    )
    if not transactions:
        return Reply(
            message="No escrow transactions found.\n\n1. Create Transaction\n0. Back",
            next_level=MenuLevel.escrow,
        )
    return Reply(
        message=fit_list(
            "Escrow Transactions:",
            [f"{format_amount(t.amount)} - {t.status}" for t in transactions],
            "1. View All\n2. Create Transaction\n0. Back",
        ),
        next_level=MenuLevel.escrow,
    )


async def render_complaints(session: UssdSession, directory) -> Reply:
    complaints = await directory.list_complaints(session.user_id, limit=settings.ussd_list_limit)
    if not complaints:
        return Reply(
            message="No complaints found.\n\n1. Submit Complaint\n0. Back",
            next_level=MenuLevel.complaints,
        )
    return Reply(
        message=fit_list(
            "Your Complaints:",
            [f"{c.title} - {c.status}" for c in complaints],
            "1. View All\n2. Submit Complaint\n0. Back",
        ),
        next_level=MenuLevel.complaints,
    )


Renderer = Callable[[UssdSession, object], Awaitable[Reply]]

# action -> (renderer, level kept on failure, noun used in the error text)
RENDERERS: dict[ListAction, tuple[Renderer, MenuLevel, str]] = {
    ListAction.groups: (render_groups, MenuLevel.groups, "groups"),
    ListAction.savings: (render_savings, MenuLevel.savings, "savings"),
    ListAction.loans: (render_loans, MenuLevel.loans, "loans"),
    ListAction.contributions: (render_contributions, MenuLevel.contributions, "contributions"),
    ListAction.escrow: (render_escrow, MenuLevel.escrow, "escrow transactions"),
    ListAction.complaints: (render_complaints, MenuLevel.complaints, "complaints"),
}


async def render_list(action: ListAction, session: UssdSession, directory) -> Reply:
    """
    Run the renderer for `action`.

    Args:
        action: which list screen to build.
        session: the current dialog; must be logged in.
        directory: read collaborator (ThriftDirectory or a test double).

    Returns:
        The screen, "Please login first." when the dialog has no member,
        or "Error loading X. Please try again." when the read fails.
    """
    if not session.is_authenticated or not session.user_id:
        return _login_required()

    renderer, level, noun = RENDERERS[action]
    try:
        return await renderer(session, directory)
    except SQLAlchemyError:
        logger.exception(
            "USSD list read failed action=%s session_id=%s", action.value, session.session_id
        )
        return Reply(message=f"Error loading {noun}. Please try again.", next_level=level)
