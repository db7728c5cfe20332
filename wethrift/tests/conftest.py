"""
Test configuration for WeThrift USSD tests.

The project root is put on sys.path so 'from wethrift...' resolves whether
pytest runs from the repository root or from wethrift/.
"""
import sys
from pathlib import Path

import pytest

_project_root = Path(__file__).parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from wethrift.tests.fakes import PHONE, SESSION_ID, USER_ID, FakeDirectory, FakeSessionStore  # noqa: E402
from wethrift.ussd.engine import UssdEngine  # noqa: E402
from wethrift.ussd.schemas import MenuLevel, UssdSession  # noqa: E402


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_store() -> FakeSessionStore:
    return FakeSessionStore()


@pytest.fixture
def fake_directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def engine(fake_store, fake_directory) -> UssdEngine:
    return UssdEngine(fake_store, fake_directory)


@pytest.fixture
def seed_session(fake_store):
    """Put a dialog in the fake store at a given level; logged in by default."""

    def _seed(
        level: MenuLevel = MenuLevel.main,
        authenticated: bool = True,
        context=None,
        session_id: str = SESSION_ID,
    ) -> UssdSession:
        session = UssdSession(
            session_id=session_id,
            phone_number=PHONE,
            menu_level=level,
            is_authenticated=authenticated,
            user_id=USER_ID if authenticated else None,
            context=context,
        )
        fake_store.sessions[session_id] = session
        return session

    return _seed
