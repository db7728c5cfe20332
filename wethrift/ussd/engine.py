"""
engine.py — USSD menu dispatcher.

One call to UssdEngine.process_request is one gateway turn:
  1. load (or create) the dialog for session_id
  2. dispatch the keystroke on the stored menu level
  3. store the next level / progress and answer the gateway

Store failures degrade instead of failing the turn: a failed read is treated
as a new dialog, a failed write still returns this turn's screen. Any other
error ends the dialog with a generic apology.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from wethrift.config import settings
from wethrift.models.group import MAX_GROUP_NAME_LENGTH
from wethrift.services.groups import GroupJoinError
from wethrift.ussd import menus
from wethrift.ussd.menus import (
    MENUS,
    WELCOME_MENU,
    Reply,
    Transition,
    TransitionKind,
    lookup,
)
from wethrift.ussd.rendering import render_list
from wethrift.ussd.schemas import (
    AuthFailed,
    AwaitPhone,
    AwaitPin,
    AwaitText,
    MenuLevel,
    PromptKind,
    UssdResponse,
    UssdSession,
)
from wethrift.ussd.session_store import SessionStoreError
from wethrift.ussd.validator import is_valid_phone_number, is_valid_pin

logger = logging.getLogger(__name__)

CANCEL = "0"
MIN_GROUP_NAME_LENGTH = 2


def _fill(text: str) -> str:
    return text.format(
        service_name=settings.ussd_service_name,
        support_phone=settings.ussd_support_phone,
        support_email=settings.ussd_support_email,
    )


class UssdEngine:
    """
    Args:
        store: UssdSessionStore (get / create / update).
        directory: ThriftDirectory, or any object with the same read methods.
    """

    def __init__(self, store, directory) -> None:
        self._store = store
        self._directory = directory

    async def process_request(
        self, session_id: str, phone_number: str, user_input: str
    ) -> UssdResponse:
        try:
            session = await self._load(session_id, phone_number)
            session = session.model_copy(update={"user_input": user_input})
            reply = await self._dispatch(session, user_input.strip())
            await self._save(self._apply(session, reply))
        except Exception:
            logger.exception("USSD turn failed session_id=%s", session_id)
            await self._discard_writes(session_id)
            return UssdResponse(message=menus.GENERIC_ERROR, should_end=True)

        logger.info(
            "USSD turn session_id=%s %s -> %s end=%s",
            session_id,
            session.menu_level.value,
            reply.next_level.value,
            reply.should_end,
        )
        return UssdResponse(
            message=reply.message,
            should_end=reply.should_end,
            next_menu=None if reply.should_end else reply.next_level,
        )

    # -----------------------------------------------------------------------
    # Session load / save
    # -----------------------------------------------------------------------

    async def _load(self, session_id: str, phone_number: str) -> UssdSession:
        session: Optional[UssdSession] = None
        try:
            session = await self._store.get(session_id)
        except SessionStoreError:
            logger.warning("USSD session read failed, starting fresh session_id=%s", session_id)

        if session is not None:
            return session
        try:
            return await self._store.create(session_id, phone_number)
        except SessionStoreError as exc:
            logger.warning("USSD session create failed, continuing unsaved session_id=%s", session_id)
            if exc.session is None:
                raise
            return exc.session

    async def _save(self, session: UssdSession) -> None:
        try:
            await self._store.update(session)
        except SessionStoreError:
            logger.warning("USSD session update failed session_id=%s", session.session_id)

    async def _discard_writes(self, session_id: str) -> None:
        try:
            await self._store.rollback()
        except SQLAlchemyError:
            logger.exception("USSD rollback failed session_id=%s", session_id)

    @staticmethod
    def _apply(session: UssdSession, reply: Reply) -> UssdSession:
        changes = {"menu_level": reply.next_level, "context": reply.progress}
        if reply.user_id:
            changes["is_authenticated"] = True
            changes["user_id"] = reply.user_id
        if reply.group_id:
            changes["group_id"] = reply.group_id
        return session.model_copy(update=changes)

    # -----------------------------------------------------------------------
    # Dispatch
    # -----------------------------------------------------------------------

    async def _dispatch(self, session: UssdSession, user_input: str) -> Reply:
        level = session.menu_level

        if level is MenuLevel.main and not session.is_authenticated:
            return self._welcome()
        if level is MenuLevel.auth:
            return await self._handle_auth(session, user_input)
        if not session.is_authenticated:
            return Reply(message=menus.LOGIN_REQUIRED, next_level=MenuLevel.auth, progress=AwaitPhone())

        if isinstance(session.context, AwaitText):
            return await self._answer_prompt(session, session.context.prompt, user_input)

        transition = lookup(level, user_input)
        if transition is None:
            return Reply(message=MENUS[level].render_invalid(), next_level=level)
        return await self._follow(session, transition)

    async def _follow(self, session: UssdSession, transition: Transition) -> Reply:
        kind = transition.kind
        if kind is TransitionKind.menu:
            message = _fill(MENUS[transition.menu].render(transition.with_title))
            return Reply(message=message, next_level=transition.next_level)
        if kind is TransitionKind.action:
            return await render_list(transition.action, session, self._directory)
        if kind is TransitionKind.prompt:
            return Reply(
                message=_fill(transition.text),
                next_level=transition.next_level,
                progress=AwaitText(prompt=transition.prompt),
            )
        return Reply(
            message=_fill(transition.text),
            next_level=transition.next_level,
            should_end=kind is TransitionKind.end,
        )

    @staticmethod
    def _welcome(attempts: int = 0) -> Reply:
        return Reply(
            message=_fill(WELCOME_MENU.render()),
            next_level=MenuLevel.auth,
            progress=AwaitPhone(attempts=attempts),
        )

    # -----------------------------------------------------------------------
    # Login sub-flow
    # -----------------------------------------------------------------------

    async def _handle_auth(self, session: UssdSession, user_input: str) -> Reply:
        progress = session.context
        if isinstance(progress, AwaitPin):
            return await self._check_pin(session, progress, user_input)
        if isinstance(progress, AuthFailed):
            return self._after_failure(progress, user_input)

        attempts = progress.attempts if isinstance(progress, AwaitPhone) else 0
        if not is_valid_phone_number(user_input):
            return Reply(
                message=menus.INVALID_PHONE,
                next_level=MenuLevel.auth,
                progress=AwaitPhone(attempts=attempts),
            )
        return Reply(
            message=menus.ENTER_PIN,
            next_level=MenuLevel.auth,
            progress=AwaitPin(phone=user_input, attempts=attempts),
        )

    async def _check_pin(self, session: UssdSession, progress: AwaitPin, pin: str) -> Reply:
        if not is_valid_pin(pin):
            return Reply(message=menus.INVALID_PIN_FORMAT, next_level=MenuLevel.auth, progress=progress)

        user_id = await self._directory.authenticate(progress.phone, pin)
        if user_id:
            logger.info("USSD login session_id=%s user_id=%s", session.session_id, user_id)
            main_options = MENUS[MenuLevel.main].render()
            return Reply(
                message=f"{menus.LOGIN_SUCCESS_TITLE}\n\n{main_options}",
                next_level=MenuLevel.main,
                user_id=user_id,
            )

        attempts = progress.attempts + 1
        logger.info("USSD login failed session_id=%s attempts=%d", session.session_id, attempts)
        if attempts >= settings.ussd_max_pin_attempts:
            return self._locked_out(attempts)
        return Reply(
            message=menus.INVALID_CREDENTIALS,
            next_level=MenuLevel.auth,
            progress=AuthFailed(attempts=attempts),
        )

    def _after_failure(self, progress: AuthFailed, choice: str) -> Reply:
        if progress.attempts >= settings.ussd_max_pin_attempts:
            return self._locked_out(progress.attempts)
        if choice == "1":
            return Reply(
                message=menus.ENTER_PHONE,
                next_level=MenuLevel.auth,
                progress=AwaitPhone(attempts=progress.attempts),
            )
        if choice == "2":
            return Reply(message=_fill(menus.REGISTER_INFO), next_level=MenuLevel.auth, progress=progress)
        if choice == "0":
            return self._welcome(progress.attempts)
        return Reply(
            message=f"{menus.INVALID_INPUT}\n\n{menus.AUTH_FAILED_OPTIONS}",
            next_level=MenuLevel.auth,
            progress=progress,
        )

    @staticmethod
    def _locked_out(attempts: int) -> Reply:
        return Reply(
            message=menus.TOO_MANY_ATTEMPTS,
            next_level=MenuLevel.auth,
            should_end=True,
            progress=AuthFailed(attempts=attempts),
        )

    # -----------------------------------------------------------------------
    # Free-text group prompts
    # -----------------------------------------------------------------------

    async def _answer_prompt(self, session: UssdSession, prompt: PromptKind, text: str) -> Reply:
        if text == CANCEL:
            return Reply(message=MENUS[MenuLevel.groups].render(), next_level=MenuLevel.groups)
        pending = AwaitText(prompt=prompt)

        if prompt is PromptKind.join_group:
            try:
                group = await self._directory.join_group(text, session.user_id)
            except GroupJoinError as exc:
                return Reply(message=f"{exc}\n\n0. Back", next_level=MenuLevel.groups, progress=pending)
            return Reply(
                message=f"You have joined {group.name}.\n\n0. Back",
                next_level=MenuLevel.groups,
                group_id=group.id,
            )

        if len(text) < MIN_GROUP_NAME_LENGTH:
            return Reply(
                message="Group name must be at least 2 characters:",
                next_level=MenuLevel.groups,
                progress=pending,
            )
        if len(text) > MAX_GROUP_NAME_LENGTH:
            return Reply(
                message=f"Group name must be at most {MAX_GROUP_NAME_LENGTH} characters:",
                next_level=MenuLevel.groups,
                progress=pending,
            )
        group = await self._directory.create_group(text, session.user_id)
        return Reply(
            message=f"Group {group.name} created.\nInvite code: {group.invite_code}\n\n0. Back",
            next_level=MenuLevel.groups,
            group_id=group.id,
        )
