"""pending_registry.py
Per-session record of which fields have an outstanding regeneration.
"""
import itertools
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from cv_builder.exceptions import AlreadyInProgressError
from cv_builder.models import FieldRegenerationRequest, RequestStatus

# Key reserved for whole-document operations (tailoring)
DOCUMENT_KEY = "__document__"

PendingKey = Tuple[str, Optional[int]]


class PendingRegistry:
    """
    Explicit map of `(field_key, index) -> FieldRegenerationRequest`.

    Entries are created when a request is dispatched and removed when it
    completes. Check-and-set happens without any `await` in between, so with a
    single event loop no two callers can both see a key as free.

    A whole-document hold (tailoring) is exclusive with every field hold: it
    cannot start while any field is pending, and no field can start while it
    is held.
    """

    def __init__(self):
        self._pending: Dict[PendingKey, FieldRegenerationRequest] = {}
        self._ids = itertools.count(1)

    # ----------------------
    # QUERIES
    # ----------------------
    def is_pending(self, field_key: str, index: Optional[int] = None) -> bool:
        return (field_key, index) in self._pending

    def is_document_pending(self) -> bool:
        return self.is_pending(DOCUMENT_KEY)

    def has_field_requests(self) -> bool:
        return any(key[0] != DOCUMENT_KEY for key in self._pending)

    def pending_requests(self) -> List[FieldRegenerationRequest]:
        return [r for r in self._pending.values() if r.field_key != DOCUMENT_KEY]

    def is_current(self, request: FieldRegenerationRequest) -> bool:
        """True while `request` still owns its key (not cleared or superseded)."""
        return self._pending.get(request.key) is request

    # ----------------------
    # ACQUISITION
    # ----------------------
    @contextmanager
    def hold(self, field_key: str, index: Optional[int] = None) -> Iterator[FieldRegenerationRequest]:
        """
        Mark `(field_key, index)` pending for the duration of the block.

        The marker is removed on every exit path, including exceptions and
        task cancellation. Status ends as SUCCEEDED if the block set it so,
        FAILED otherwise.

        Raises:
            AlreadyInProgressError: If the key (or the whole document) is busy.
        """
        if self.is_document_pending():
            raise AlreadyInProgressError(
                field_key=field_key,
                index=index,
                message="The whole document is being tailored; field regeneration is paused."
            )
        request = self._acquire(field_key, index)
        try:
            yield request
        finally:
            self._release(request)

    @contextmanager
    def hold_document(self) -> Iterator[FieldRegenerationRequest]:
        """
        Exclusive hold over the whole document.

        Raises:
            AlreadyInProgressError: If any field regeneration (or another
                whole-document operation) is pending.
        """
        if self.has_field_requests():
            busy = ", ".join(self._describe(r) for r in self.pending_requests())
            raise AlreadyInProgressError(
                field_key=DOCUMENT_KEY,
                message=f"Cannot rewrite the whole document while regenerating: {busy}."
            )
        request = self._acquire(DOCUMENT_KEY, None)
        try:
            yield request
        finally:
            self._release(request)

    def clear(self) -> None:
        """Drop every marker (logout/clear). In-flight requests become stale."""
        for request in self._pending.values():
            request.status = RequestStatus.FAILED
        self._pending.clear()

    # ----------------------
    # HELPERS
    # ----------------------
    def _acquire(self, field_key: str, index: Optional[int]) -> FieldRegenerationRequest:
        key = (field_key, index)
        if key in self._pending:
            raise AlreadyInProgressError(field_key=field_key, index=index)
        request = FieldRegenerationRequest(
            field_key=field_key,
            index=index,
            status=RequestStatus.PENDING,
            request_id=next(self._ids),
        )
        self._pending[key] = request
        return request

    def _release(self, request: FieldRegenerationRequest) -> None:
        if request.status == RequestStatus.PENDING:
            request.status = RequestStatus.FAILED
        # Only remove the entry this request owns
        if self.is_current(request):
            del self._pending[request.key]

    @staticmethod
    def _describe(request: FieldRegenerationRequest) -> str:
        if request.index is None:
            return request.field_key
        return f"{request.field_key}[{request.index}]"
