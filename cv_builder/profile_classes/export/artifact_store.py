"""artifact_store.py
Keeps the latest generated export artifact of each live session.
"""
import uuid
from typing import Dict, Optional

from cv_builder.exceptions import ExportNotReadyError, ExportRetrievalError


class ExportArtifactStore:
    """
    In-memory store of rendered documents, addressed by opaque handles.

    Only the latest artifact of each session is kept; generating again
    invalidates the previous handle.
    """

    def __init__(self):
        self._artifacts: Dict[str, bytes] = {}
        self._owners: Dict[str, str] = {}
        self._latest: Dict[str, str] = {}

    def put(self, session_id: str, content: bytes) -> str:
        """Store `content` for `session_id` and return its handle."""
        previous = self._latest.get(session_id)
        if previous is not None:
            self._artifacts.pop(previous, None)
            self._owners.pop(previous, None)
        handle = uuid.uuid4().hex
        self._artifacts[handle] = content
        self._owners[handle] = session_id
        self._latest[session_id] = handle
        return handle

    def retrieve(self, session_id: str, handle: Optional[str] = None) -> bytes:
        """
        Return the artifact named by `handle`, or the session's latest one.

        Raises:
            ExportNotReadyError: If nothing was generated for the session yet.
            ExportRetrievalError: If `handle` is unknown or belongs to another session.
        """
        if handle is None:
            handle = self._latest.get(session_id)
            if handle is None:
                raise ExportNotReadyError()

        if handle not in self._artifacts or self._owners.get(handle) != session_id:
            raise ExportRetrievalError(f"No export artifact `{handle}` for this session.")
        return self._artifacts[handle]

    def discard(self, session_id: str) -> None:
        """Drop every artifact of `session_id`."""
        for handle in [h for h, owner in self._owners.items() if owner == session_id]:
            del self._artifacts[handle]
            del self._owners[handle]
        self._latest.pop(session_id, None)
