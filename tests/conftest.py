"""Shared test fixtures for PayStream.

Resets the process-wide diagram configuration around every test and
provides sessions at the start of the analyzing phase.
"""

from __future__ import annotations

import pytest

from paystream.diagram.config import reset_configuration
from paystream.models.events import SubjectFetched, SubjectMeta
from paystream.reducer import reduce
from paystream.session import Session

from tests.scenarios import REPO


@pytest.fixture(autouse=True)
def _fresh_render_config():
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def analyzing() -> Session:
    """A session that has fetched its subject and is waiting for workers."""
    session = Session.begin(REPO, 1.5)
    return reduce(session, SubjectFetched(meta=SubjectMeta(name="acme/widgets")))
