"""tailoring_engine.py
Rewrites the whole document for a target job title.
"""
import asyncio
from typing import Optional

from cv_builder.config import BUILDER_DEFAULTS
from cv_builder.logging import LoggerFactory
from cv_builder.exceptions import (
    CVBuilderError,
    GenerationTimeoutError,
    MissingInputError,
    NetworkFailureError,
    StaleTargetError,
)
from cv_builder.models import Outcome, ProfileDocument, RequestStatus, SessionContext
from cv_builder.profile_classes.document_store.document_store import DocumentStore
from cv_builder.profile_classes.generator.profile_generator import ProfileGenerator, TailoringContext
from cv_builder.profile_classes.patches.generator_responses import unwrap_tailoring_response
from cv_builder.profile_classes.patches.profile_patch import FullDocumentPatch
from cv_builder.profile_classes.regeneration.pending_registry import PendingRegistry

# Load tailoring specific logger
logger_factory = LoggerFactory()
tailoring_logger = logger_factory.get_logger(
    name="tailoring",
    logger_type="tailoring"
)


class TailoringEngine:
    """
    Requests a full rewrite of the document and, on success, replaces it
    atomically. There is no field-level merge: the generator rewrites the
    document as a whole.

    Tailoring and field regeneration are serialized through the shared
    PendingRegistry: tailoring is refused while any field regeneration is
    pending, and regeneration is refused while tailoring runs.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        generator: ProfileGenerator,
        session: SessionContext,
        pending_registry: Optional[PendingRegistry] = None,
        timeout_seconds: float = BUILDER_DEFAULTS.TAILORING_TIMEOUT_SECONDS,
    ):
        self.document_store = document_store
        self.generator = generator
        self.session = session
        self.pending_registry = pending_registry if pending_registry is not None else PendingRegistry()
        self.timeout_seconds = timeout_seconds

    @property
    def is_tailoring(self) -> bool:
        return self.pending_registry.is_document_pending()

    async def tailor(self, job_title: str, current_document: Optional[ProfileDocument] = None) -> Outcome:
        """
        Tailor the document to `job_title`.

        Args:
            job_title (str): Target job title; must not be blank.
            current_document (Optional[ProfileDocument]): Document to send. Defaults
                to the store's current document.

        Returns:
            Outcome: `value` is the new document on success. On failure the
                existing document is unchanged.
        """
        if not job_title or not job_title.strip():
            return Outcome.failure(MissingInputError("job_title"))
        job_title = job_title.strip()

        try:
            with self.pending_registry.hold_document() as request:
                document = (current_document or self.document_store.get()).copy()
                tailoring_logger.info(f"Tailoring #{request.request_id} for `{job_title}` dispatched.")
                response = await asyncio.wait_for(
                    self.generator.tailor_document(
                        TailoringContext(
                            session_id=self.session.session_id,
                            job_title=job_title,
                            document=document,
                        )
                    ),
                    timeout=self.timeout_seconds,
                )
                patch = FullDocumentPatch(document=unwrap_tailoring_response(response))
                if not self.pending_registry.is_current(request):
                    raise StaleTargetError(
                        field_key="document",
                        message=f"Tailoring #{request.request_id} was superseded; its response was discarded.",
                    )
                self.document_store.replace_all(patch.document)
                request.status = RequestStatus.SUCCEEDED
        except asyncio.TimeoutError:
            error = GenerationTimeoutError(operation=f"tailor to {job_title}", timeout_seconds=self.timeout_seconds)
            tailoring_logger.warning(str(error))
            return Outcome.failure(error)
        except OSError as e:
            error = NetworkFailureError(str(e))
            tailoring_logger.warning(f"Tailoring for `{job_title}` lost its connection: {e}")
            return Outcome.failure(error)
        except CVBuilderError as e:
            tailoring_logger.warning(f"Tailoring for `{job_title}` failed [{e.code}]: {e}")
            return Outcome.failure(e)

        tailoring_logger.info(f"Document tailored for `{job_title}`.")
        return Outcome.success(self.document_store.get().copy())
