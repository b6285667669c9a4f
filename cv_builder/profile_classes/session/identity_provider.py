"""identity_provider.py
In-process stand-in for the identity/session service.
"""
import uuid
from typing import Any, Dict, Mapping, Optional, Union

from cv_builder.models import IdentityProfile


class InMemoryIdentityProvider:
    """
    Keeps imported identity profiles keyed by session id.

    `register` plays the part of the OAuth callback: it receives the profile
    the provider handed over and opens a session for it.
    """

    def __init__(self):
        self._profiles: Dict[str, IdentityProfile] = {}

    def register(self, profile: Union[IdentityProfile, Mapping[str, Any]], session_id: Optional[str] = None) -> str:
        """
        Open a session for `profile`.

        Returns:
            str: The session id (generated unless given).
        """
        if not isinstance(profile, IdentityProfile):
            profile = IdentityProfile.from_dict(profile)
        session_id = session_id or uuid.uuid4().hex
        self._profiles[session_id] = profile
        return session_id

    def has_session(self, session_id: Optional[str]) -> bool:
        return session_id is not None and session_id in self._profiles

    async def fetch_profile(self, session_id: Optional[str]) -> Optional[IdentityProfile]:
        """Return the profile of `session_id`, or None when there is none."""
        if session_id is None:
            return None
        return self._profiles.get(session_id)

    def discard(self, session_id: Optional[str]) -> None:
        if session_id is not None:
            self._profiles.pop(session_id, None)

    async def end_session(self, session_id: Optional[str]) -> None:
        self.discard(session_id)
