"""dummy_classes.py
Holds dummy collaborators (generator, identity provider) to test with
"""
import asyncio
from typing import Any, Dict, List, Optional, Tuple

from cv_builder.models import IdentityProfile
from cv_builder.profile_classes.generator.profile_generator import (
    ProfileGenerator,
    RegenerationContext,
    TailoringContext,
    GenerationPayload,
)
from cv_builder.profile_classes.session.identity_provider import InMemoryIdentityProvider


class ScriptedGenerator(ProfileGenerator):
    """
    ProfileGenerator whose answers are scripted by the test.

    With `hold_responses=False` every call answers immediately with the canned
    response for its operation ("regenerate_field", "tailor_document",
    "generate_cv"). A canned response may be an envelope, a callable taking the
    context, or an exception to raise.

    With `hold_responses=True` calls park on a future until the test calls
    `release()`, so user edits can be interleaved with in-flight requests.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None, hold_responses: bool = False):
        self.responses = responses or {}
        self.hold_responses = hold_responses
        self.calls: List[Tuple[str, Any]] = []
        self.waiting: List[Tuple[str, Any, asyncio.Future]] = []

    async def regenerate_field(self, context: RegenerationContext) -> Dict[str, Any]:
        return await self._answer("regenerate_field", context)

    async def tailor_document(self, context: TailoringContext) -> Dict[str, Any]:
        return await self._answer("tailor_document", context)

    async def generate_cv(self, payload: GenerationPayload) -> Dict[str, Any]:
        return await self._answer("generate_cv", payload)

    async def _answer(self, operation: str, context: Any) -> Any:
        self.calls.append((operation, context))
        if self.hold_responses:
            future = asyncio.get_running_loop().create_future()
            self.waiting.append((operation, context, future))
            return await future

        response = self.responses.get(operation)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(context)
        return response

    def release(self, response: Any, position: int = 0) -> Any:
        """Answer the parked call at `position` (oldest first). Returns that call's context."""
        _, context, future = self.waiting.pop(position)
        if isinstance(response, BaseException):
            future.set_exception(response)
        else:
            future.set_result(response)
        return context

    async def wait_for_calls(self, count: int = 1) -> None:
        """Yield to the event loop until `count` calls are parked."""
        while len(self.waiting) < count:
            await asyncio.sleep(0)


class SlowIdentityProvider(InMemoryIdentityProvider):
    """Identity provider that takes `delay_seconds` to answer."""

    def __init__(self, delay_seconds: float):
        super().__init__()
        self.delay_seconds = delay_seconds

    async def fetch_profile(self, session_id: Optional[str]) -> Optional[IdentityProfile]:
        await asyncio.sleep(self.delay_seconds)
        return await super().fetch_profile(session_id)


class UnreachableIdentityProvider(InMemoryIdentityProvider):
    """Identity provider whose connection always drops."""

    async def fetch_profile(self, session_id: Optional[str]) -> Optional[IdentityProfile]:
        raise ConnectionResetError("Connection reset by peer")
