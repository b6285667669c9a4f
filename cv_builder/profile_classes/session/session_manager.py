"""session_manager.py
Keeps one EditingSession per session id and drops the ones left idle.
"""
import time
import uuid
from typing import Any, Callable, Dict, Mapping, Optional, Union

from cv_builder.config import BUILDER_DEFAULTS
from cv_builder.logging import LoggerFactory
from cv_builder.models import IdentityProfile
from cv_builder.profile_classes.export.artifact_store import ExportArtifactStore
from cv_builder.profile_classes.generator.profile_generator import ProfileGenerator
from cv_builder.profile_classes.session.editing_session import EditingSession
from cv_builder.profile_classes.session.identity_provider import InMemoryIdentityProvider

# Load default logger
logger_factory = LoggerFactory()
logger = logger_factory.get_logger(
    name="session_manager",
    logger_type="default"
)


class SessionManager:
    """
    Registry of the live editing sessions of a server process.

    A session untouched for `idle_ttl_seconds` is dropped, together with its
    identity profile and export artifacts, the next time a session is opened.

    Args:
        generator_factory (Callable[[], ProfileGenerator]): Builds the generator
            each new session uses.
        idle_ttl_seconds (float): Idle time after which a session is evicted.
        clock (Callable[[], float]): Monotonic time source.
        **session_kwargs: Passed on to every EditingSession (timeouts, CV
            generation variant, renderer).
    """

    def __init__(
        self,
        generator_factory: Callable[[], ProfileGenerator],
        idle_ttl_seconds: float = BUILDER_DEFAULTS.SESSION_IDLE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        **session_kwargs: Any,
    ):
        self.generator_factory = generator_factory
        self.idle_ttl_seconds = idle_ttl_seconds
        self.clock = clock
        self.session_kwargs = session_kwargs
        self.identity_provider = InMemoryIdentityProvider()
        self.artifact_store = ExportArtifactStore()
        self._sessions: Dict[str, EditingSession] = {}
        self._last_access: Dict[str, float] = {}

    def has_session(self, session_id: Optional[str]) -> bool:
        return session_id is not None and session_id in self._sessions

    def get(self, session_id: Optional[str]) -> Optional[EditingSession]:
        if session_id is None:
            return None
        session = self._sessions.get(session_id)
        if session is not None:
            self._last_access[session_id] = self.clock()
        return session

    def get_or_create(self, session_id: Optional[str] = None) -> EditingSession:
        """Return the session for `session_id`, creating an anonymous one if needed."""
        self.evict_idle()
        existing = self.get(session_id)
        if existing is not None:
            return existing
        return self._create(session_id or uuid.uuid4().hex, user_id=None, authenticated=False)

    def login(self, identity_payload: Union[IdentityProfile, Mapping[str, Any]]) -> EditingSession:
        """
        Open an authenticated session for an imported identity profile.

        Raises:
            ShapeMismatchError: If `identity_payload` is not an object or one of
                its fields has the wrong type.
        """
        self.evict_idle()
        profile = identity_payload if isinstance(identity_payload, IdentityProfile) else IdentityProfile.from_dict(identity_payload)
        session_id = self.identity_provider.register(profile)
        logger.info(f"Session `{session_id}` opened for user `{profile.id}`.")
        return self._create(session_id, user_id=profile.id, authenticated=True)

    def drop(self, session_id: Optional[str]) -> None:
        if session_id is not None and self._sessions.pop(session_id, None) is not None:
            self._last_access.pop(session_id, None)
            logger.info(f"Session `{session_id}` dropped.")

    def evict_idle(self) -> int:
        """
        Drop every session idle for longer than `idle_ttl_seconds`.

        Returns:
            int: Number of sessions evicted.
        """
        now = self.clock()
        expired = [
            session_id for session_id, last_access in self._last_access.items()
            if now - last_access > self.idle_ttl_seconds
        ]
        for session_id in expired:
            self.drop(session_id)
            self.identity_provider.discard(session_id)
            self.artifact_store.discard(session_id)
        if expired:
            logger.info(f"Evicted {len(expired)} idle session(s).")
        return len(expired)

    def _create(self, session_id: str, user_id: Optional[str], authenticated: bool) -> EditingSession:
        session = EditingSession(
            generator=self.generator_factory(),
            session_id=session_id,
            user_id=user_id,
            authenticated=authenticated,
            identity_provider=self.identity_provider,
            artifact_store=self.artifact_store,
            **self.session_kwargs,
        )
        self._sessions[session_id] = session
        self._last_access[session_id] = self.clock()
        return session
