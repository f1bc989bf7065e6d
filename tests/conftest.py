from typing import List, Optional

import pytest

from sareestage.core.entitlements import EntitlementStore
from sareestage.core.errors import PersistenceError
from sareestage.core.session import Session
from sareestage.core.store import MemoryStore
from sareestage.services.tryon_flow import TryOnWorkflow

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64
GIF_BYTES = b"GIF89a" + b"\x00" * 64


class FlakyStore(MemoryStore):
    """MemoryStore whose writes can be switched to fail like a full quota."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceError()
        super().set(key, value)


class FakeGenerator:
    """Scripted generation collaborator; each outcome is an image string or an exception."""

    def __init__(self, outcomes: Optional[List] = None):
        self.outcomes = list(outcomes or [])
        self.requests = []
        self.edits = []

    async def generate(self, request):
        self.requests.append(request)
        return self._next()

    async def edit(self, request):
        self.edits.append(request)
        return self._next()

    def _next(self):
        outcome = self.outcomes.pop(0) if self.outcomes else "ZmFrZS1pbWFnZQ=="
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def store():
    return FlakyStore()


@pytest.fixture
def session(store):
    return Session(store)


@pytest.fixture
def entitlements(store, session):
    return EntitlementStore(store, session)


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def workflow(generator, entitlements):
    return TryOnWorkflow(generator, entitlements)


@pytest.fixture
def filled_workflow(workflow):
    """Workflow holding a complete, valid upload form."""
    workflow.attach_model_image(JPEG_BYTES, "image/jpeg", "me.jpg")
    workflow.attach_body_image(PNG_BYTES, "image/png", "body.png")
    workflow.attach_pallu_image(PNG_BYTES, "image/png", "pallu.png")
    workflow.set_body_text("Emerald green silk with gold buttas")
    workflow.set_blouse("running")
    workflow.set_consent(True)
    return workflow
