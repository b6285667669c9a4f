"""editing_session.py
One user's editing session: the document and every component acting on it.
"""
import asyncio
from typing import Any, Callable, Mapping, Optional

from cv_builder.config import BUILDER_DEFAULTS
from cv_builder.logging import LoggerFactory
from cv_builder.exceptions import (
    CVBuilderError,
    GenerationTimeoutError,
    NetworkFailureError,
)
from cv_builder.models import ExportSnapshot, Outcome, ProfileDocument, SessionContext
from cv_builder.data.sample_profile import build_sample_profile
from cv_builder.profile_classes.document_store.document_store import DocumentStore
from cv_builder.profile_classes.export.artifact_store import ExportArtifactStore
from cv_builder.profile_classes.export.cv_generation import CVGenerationService, GenerationVariant, Renderer
from cv_builder.profile_classes.export.export_snapshot import ExportSnapshotProvider
from cv_builder.profile_classes.export.plaintext_renderer import render_plaintext
from cv_builder.profile_classes.generator.profile_generator import ProfileGenerator
from cv_builder.profile_classes.regeneration.pending_registry import PendingRegistry
from cv_builder.profile_classes.regeneration.regeneration_coordinator import FieldRegenerationCoordinator
from cv_builder.profile_classes.session.identity_provider import InMemoryIdentityProvider
from cv_builder.profile_classes.source_resolver.source_resolver import SourceResolver
from cv_builder.profile_classes.tailoring.tailoring_engine import TailoringEngine

# Load default logger
logger_factory = LoggerFactory()
logger = logger_factory.get_logger(
    name="editing_session",
    logger_type="default"
)


class EditingSession:
    """
    Wires a DocumentStore to the resolver, the regeneration coordinator, the
    tailoring engine and the export components of one session.

    Every operation returns an Outcome. A new session starts on the built-in
    sample, and the document is reset to it again on clear/logout.

    Attributes:
        session (SessionContext): Identity of the session.
        document_store (DocumentStore): The session's document.
        pending_registry (PendingRegistry): Markers shared by regeneration,
            tailoring and CV generation.
    """

    def __init__(
        self,
        generator: ProfileGenerator,
        session_id: Optional[str] = None,
        user_id: Optional[str] = None,
        authenticated: bool = False,
        identity_provider: Optional[InMemoryIdentityProvider] = None,
        artifact_store: Optional[ExportArtifactStore] = None,
        cv_generation_variant: GenerationVariant = BUILDER_DEFAULTS.CV_GENERATION_VARIANT,
        renderer: Renderer = render_plaintext,
        regeneration_timeout_seconds: float = BUILDER_DEFAULTS.REGENERATION_TIMEOUT_SECONDS,
        tailoring_timeout_seconds: float = BUILDER_DEFAULTS.TAILORING_TIMEOUT_SECONDS,
        source_fetch_timeout_seconds: float = BUILDER_DEFAULTS.SOURCE_FETCH_TIMEOUT_SECONDS,
        cv_generation_timeout_seconds: float = BUILDER_DEFAULTS.CV_GENERATION_TIMEOUT_SECONDS,
    ):
        self.session = SessionContext(session_id=session_id, user_id=user_id, authenticated=authenticated)
        self.generator = generator
        self.identity_provider = identity_provider or InMemoryIdentityProvider()
        self.artifact_store = artifact_store or ExportArtifactStore()
        self.source_fetch_timeout_seconds = source_fetch_timeout_seconds
        self.logger = logger_factory.get_session_logger(logger, session_id)

        self.document_store = DocumentStore(build_sample_profile())
        self.pending_registry = PendingRegistry()
        self.resolver = SourceResolver(self.document_store)
        self.coordinator = FieldRegenerationCoordinator(
            document_store=self.document_store,
            generator=generator,
            session=self.session,
            pending_registry=self.pending_registry,
            timeout_seconds=regeneration_timeout_seconds,
        )
        self.tailoring_engine = TailoringEngine(
            document_store=self.document_store,
            generator=generator,
            session=self.session,
            pending_registry=self.pending_registry,
            timeout_seconds=tailoring_timeout_seconds,
        )
        self.snapshot_provider = ExportSnapshotProvider(self.document_store)
        self.cv_generation = CVGenerationService(
            document_store=self.document_store,
            generator=generator,
            pending_registry=self.pending_registry,
            artifact_store=self.artifact_store,
            variant=cv_generation_variant,
            renderer=renderer,
            timeout_seconds=cv_generation_timeout_seconds,
        )

    @property
    def document(self) -> ProfileDocument:
        return self.document_store.get()

    # ----------------------
    # SOURCES
    # ----------------------
    async def load_imported_profile(self) -> Outcome:
        """
        Fetch the imported identity profile and fold it into the document.

        A missing profile, a slow identity service or a transport failure all
        leave the document as it is (or the sample, if nothing was loaded yet).
        """
        try:
            payload = await asyncio.wait_for(
                self.identity_provider.fetch_profile(self.session.session_id),
                timeout=self.source_fetch_timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.resolver.resolve(None)
            return Outcome.failure(
                GenerationTimeoutError(operation="fetch imported profile", timeout_seconds=self.source_fetch_timeout_seconds)
            )
        except NetworkFailureError as e:
            self.logger.warning(f"Identity fetch failed: {e}")
            self.resolver.resolve(None)
            return Outcome.failure(e)
        except OSError as e:
            self.logger.warning(f"Identity fetch lost its connection: {e}")
            self.resolver.resolve(None)
            return Outcome.failure(NetworkFailureError(str(e)))

        return self.resolver.resolve(payload)

    def select_sample(self) -> Outcome:
        return self.resolver.resolve_sample()

    # ----------------------
    # USER EDITS
    # ----------------------
    def edit_field(self, key: str, value: Any) -> Outcome:
        """Replace one field with the user's value."""
        return self._edit(lambda: self.document_store.replace_field(key, value))

    def edit_item(self, key: str, index: int, changes: Mapping[str, str]) -> Outcome:
        """Change sub-fields of one structured list item."""
        return self._edit(lambda: self.document_store.update_item(key, index, changes))

    def add_item(self, key: str, item: Any = None) -> Outcome:
        return self._edit(lambda: self.document_store.add_item(key, item))

    def remove_item(self, key: str, index: int) -> Outcome:
        return self._edit(lambda: self.document_store.remove_item(key, index))

    def _edit(self, write: Callable[[], None]) -> Outcome:
        try:
            write()
        except CVBuilderError as e:
            self.logger.info(f"Rejected edit [{e.code}]: {e}")
            return Outcome.failure(e)
        return Outcome.success(self.document_store.get().to_dict())

    # ----------------------
    # GENERATION
    # ----------------------
    async def regenerate(self, field_key: str, index: Optional[int] = None) -> Outcome:
        return await self.coordinator.regenerate(field_key, index)

    async def tailor(self, job_title: Optional[str] = None) -> Outcome:
        """Tailor the document to `job_title` (defaults to the document's own title)."""
        if job_title is None:
            job_title = self.document_store.get().title
        return await self.tailoring_engine.tailor(job_title)

    async def generate_cv(self) -> Outcome:
        return await self.cv_generation.generate(self.session.session_id or "anonymous")

    # ----------------------
    # EXPORT
    # ----------------------
    def snapshot(self) -> ExportSnapshot:
        return self.snapshot_provider.snapshot()

    def retrieve_export(self, handle: Optional[str] = None) -> Outcome:
        try:
            return Outcome.success(
                self.artifact_store.retrieve(self.session.session_id or "anonymous", handle)
            )
        except CVBuilderError as e:
            self.logger.info(f"Export retrieval failed [{e.code}]: {e}")
            return Outcome.failure(e)

    # ----------------------
    # TEARDOWN
    # ----------------------
    def clear(self) -> None:
        """Reset to the sample document and drop every pending marker."""
        self.pending_registry.clear()
        self.document_store.reset(build_sample_profile())
        self.logger.info("Cleared; document reset to the sample.")

    async def logout(self) -> Outcome:
        """End the identity session and return to an anonymous sample session."""
        await self.identity_provider.end_session(self.session.session_id)
        self.artifact_store.discard(self.session.session_id)
        self.clear()
        self.session.authenticated = False
        self.session.user_id = None
        self.logger.info("Logged out.")
        return Outcome.success()
