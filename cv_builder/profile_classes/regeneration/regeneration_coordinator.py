"""regeneration_coordinator.py
Coordinates "regenerate this field" requests against the external generator.
"""
import asyncio
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from cv_builder.config import BUILDER_DEFAULTS
from cv_builder.logging import LoggerFactory
from cv_builder.exceptions import (
    CVBuilderError,
    GenerationTimeoutError,
    NetworkFailureError,
    ShapeMismatchError,
    StaleTargetError,
    UnauthorizedError,
)
from cv_builder.models import (
    STRUCTURED_LIST_FIELDS,
    FieldRegenerationRequest,
    Outcome,
    RequestStatus,
    SessionContext,
)
from cv_builder.profile_classes.document_store.document_store import DocumentStore
from cv_builder.profile_classes.generator.profile_generator import (
    ProfileGenerator,
    RegenerationContext,
)
from cv_builder.profile_classes.patches.generator_responses import unwrap_regeneration_response
from cv_builder.profile_classes.patches.profile_patch import build_regeneration_patch
from cv_builder.profile_classes.regeneration.pending_registry import PendingRegistry

# Load regeneration specific logger
logger_factory = LoggerFactory()
regeneration_logger = logger_factory.get_logger(
    name="regeneration",
    logger_type="regeneration"
)

REGENERABLE_FIELDS = ("summary", "skills", "experience")


class FieldRegenerationCoordinator:
    """
    Runs at most one regeneration per `(field_key, index)` and applies each
    result as a field-scoped patch.

    The generator receives a snapshot of the targeted slice taken at dispatch
    time. When its answer arrives, only the targeted field (or the targeted
    sub-fields of one list item) is written, on top of whatever the document
    holds at that moment. Edits made to other fields while the request was in
    flight are therefore kept.

    Attributes:
        document_store (DocumentStore): Store holding the session's document.
        generator (ProfileGenerator): External generator to call.
        session (SessionContext): Session used for authorization and request context.
        pending_registry (PendingRegistry): Per-session pending markers.
        timeout_seconds (float): Bound on how long to wait for the generator.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        generator: ProfileGenerator,
        session: SessionContext,
        pending_registry: Optional[PendingRegistry] = None,
        timeout_seconds: float = BUILDER_DEFAULTS.REGENERATION_TIMEOUT_SECONDS,
    ):
        self.document_store = document_store
        self.generator = generator
        self.session = session
        self.pending_registry = pending_registry if pending_registry is not None else PendingRegistry()
        self.timeout_seconds = timeout_seconds

    def is_pending(self, field_key: str, index: Optional[int] = None) -> bool:
        return self.pending_registry.is_pending(field_key, index)

    def pending_requests(self) -> List[FieldRegenerationRequest]:
        return self.pending_registry.pending_requests()

    async def regenerate(self, field_key: str, index: Optional[int] = None) -> Outcome:
        """
        Ask the generator to rewrite `field_key` (or item `index` of it) and
        apply the result.

        Args:
            field_key (str): "summary", "skills" or "experience".
            index (Optional[int]): Item to rewrite within `experience`.

        Returns:
            Outcome: `value` holds the applied value on success. Failures carry
                one of UnauthorizedError, AlreadyInProgressError, ShapeMismatchError,
                StaleTargetError, GenerationTimeoutError, RemoteFailureError or
                NetworkFailureError. The document is only changed on success.
        """
        target = f"{field_key}[{index}]" if index is not None else field_key

        if not self.session.is_authorized:
            regeneration_logger.info(f"Rejected regeneration of `{target}`: no authorized session.")
            return Outcome.failure(UnauthorizedError())

        try:
            self._validate_target(field_key, index)
            with self.pending_registry.hold(field_key, index) as request:
                regeneration_logger.info(f"Regeneration #{request.request_id} of `{target}` dispatched.")
                value = await self._run(request)
                request.status = RequestStatus.SUCCEEDED
        except asyncio.TimeoutError:
            error = GenerationTimeoutError(operation=f"regenerate {target}", timeout_seconds=self.timeout_seconds)
            regeneration_logger.warning(str(error))
            return Outcome.failure(error)
        except OSError as e:
            error = NetworkFailureError(str(e))
            regeneration_logger.warning(f"Regeneration of `{target}` lost its connection: {e}")
            return Outcome.failure(error)
        except CVBuilderError as e:
            regeneration_logger.warning(f"Regeneration of `{target}` failed [{e.code}]: {e}")
            return Outcome.failure(e)

        regeneration_logger.info(f"Regeneration of `{target}` applied.")
        return Outcome.success(value)

    # ----------------------
    # HELPERS
    # ----------------------
    def _validate_target(self, field_key: str, index: Optional[int]) -> None:
        """
        Raises:
            ShapeMismatchError: If the field cannot be regenerated or does not take an index.
            StaleTargetError: If the indexed item does not exist at dispatch time.
        """
        if field_key not in REGENERABLE_FIELDS:
            raise ShapeMismatchError(
                field_key=field_key,
                message=f"`{field_key}` cannot be regenerated; choose one of {list(REGENERABLE_FIELDS)}."
            )
        if index is None:
            return
        if field_key not in STRUCTURED_LIST_FIELDS:
            raise ShapeMismatchError(field_key=field_key, message=f"`{field_key}` does not take an item index.")
        items = getattr(self.document_store.get(), field_key)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(items):
            raise StaleTargetError(field_key=field_key, index=index)

    def _build_context(self, field_key: str, index: Optional[int]) -> RegenerationContext:
        """Snapshot the targeted slice plus the contextual fields of the current document."""
        document = self.document_store.get().to_dict()
        if index is not None:
            target: Any = document[field_key][index]
        else:
            target = document[field_key]
        context: Dict[str, Any] = {
            "title": document["title"],
            "phone": document["phone"],
            "full_name": document["full_name"],
            "skills": document["skills"],
            "experience": document["experience"],
        }
        return RegenerationContext(
            session_id=self.session.session_id,
            field_key=field_key,
            index=index,
            target=target,
            context=context,
        )

    async def _run(self, request: FieldRegenerationRequest) -> Any:
        """
        Dispatch `request`, wait for the answer and apply it.

        Raises:
            asyncio.TimeoutError: If the generator does not answer in time.
            CVBuilderError: On any remote, shape or staleness failure.
        """
        context = self._build_context(request.field_key, request.index)
        response = await asyncio.wait_for(
            self.generator.regenerate_field(context),
            timeout=self.timeout_seconds,
        )
        data = unwrap_regeneration_response(response)
        patch = build_regeneration_patch(request.field_key, request.index, data)

        # Logout/clear while in flight drops the marker; the answer is no longer wanted
        if not self.pending_registry.is_current(request):
            raise StaleTargetError(
                field_key=request.field_key,
                index=request.index,
                message=f"Regeneration #{request.request_id} was superseded; its response was discarded.",
            )

        self.document_store.apply_patch(patch)

        applied = getattr(self.document_store.get(), request.field_key)
        if request.index is not None:
            return asdict(applied[request.index])
        if request.field_key in STRUCTURED_LIST_FIELDS:
            return [asdict(item) for item in applied]
        return applied
