"""cv_generation.py
Full CV generation: produces either an inline summary or a downloadable artifact.
"""
import asyncio
from dataclasses import replace
from typing import Callable, Literal

from cv_builder.config import BUILDER_DEFAULTS
from cv_builder.logging import LoggerFactory
from cv_builder.exceptions import (
    CVBuilderError,
    GenerationTimeoutError,
    NetworkFailureError,
    ShapeMismatchError,
    StaleTargetError,
)
from cv_builder.models import ExportSnapshot, Outcome, ProfileDocument, RequestStatus
from cv_builder.profile_classes.document_store.document_store import DocumentStore
from cv_builder.profile_classes.export.artifact_store import ExportArtifactStore
from cv_builder.profile_classes.export.export_snapshot import ExportSnapshotProvider
from cv_builder.profile_classes.export.plaintext_renderer import render_plaintext
from cv_builder.profile_classes.generator.profile_generator import GenerationPayload, ProfileGenerator
from cv_builder.profile_classes.patches.generator_responses import unwrap_generation_response
from cv_builder.profile_classes.patches.profile_patch import FieldPatch
from cv_builder.profile_classes.regeneration.pending_registry import PendingRegistry

# Load export specific logger
logger_factory = LoggerFactory()
export_logger = logger_factory.get_logger(
    name="cv_generation",
    logger_type="export"
)

GenerationVariant = Literal["summary", "artifact"]
Renderer = Callable[[ExportSnapshot], bytes]


def build_generation_payload(document: ProfileDocument, style: str = BUILDER_DEFAULTS.SUMMARY_STYLE) -> GenerationPayload:
    """Flatten the document into the generation endpoint's input."""
    experience_text = "; ".join(
        f"{item.title} at {item.company} ({item.years}): {item.description}"
        for item in document.experience
    )
    return GenerationPayload(
        name=document.full_name,
        title=document.title,
        skills=", ".join(document.skills),
        experience_text=experience_text,
        phone=document.phone,
        style=style,
    )


class CVGenerationService:
    """
    Runs full CV generation in one of two variants:

        - "summary": the generated summary is applied to the document as a
          field-scoped patch on `summary`.
        - "artifact": the document is rendered (with the generated summary)
          into a downloadable artifact; the document itself is not changed.

    Both variants hold the `summary` pending marker while the generator runs,
    so they never race a summary regeneration.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        generator: ProfileGenerator,
        pending_registry: PendingRegistry,
        artifact_store: ExportArtifactStore,
        variant: GenerationVariant = BUILDER_DEFAULTS.CV_GENERATION_VARIANT,
        renderer: Renderer = render_plaintext,
        timeout_seconds: float = BUILDER_DEFAULTS.CV_GENERATION_TIMEOUT_SECONDS,
    ):
        if variant not in ("summary", "artifact"):
            raise ValueError(f"Unknown CV generation variant `{variant}`; use 'summary' or 'artifact'.")
        self.document_store = document_store
        self.generator = generator
        self.pending_registry = pending_registry
        self.artifact_store = artifact_store
        self.variant = variant
        self.renderer = renderer
        self.timeout_seconds = timeout_seconds
        self.snapshot_provider = ExportSnapshotProvider(document_store)

    async def generate(self, session_id: str) -> Outcome:
        """
        Returns:
            Outcome: `value` is {"summary": str} for the summary variant and
                {"summary": str, "handle": str} for the artifact variant.
        """
        try:
            with self.pending_registry.hold("summary") as request:
                payload = build_generation_payload(self.document_store.get())
                export_logger.info(f"CV generation ({self.variant}) dispatched for session `{session_id}`.")
                response = await asyncio.wait_for(
                    self.generator.generate_cv(payload),
                    timeout=self.timeout_seconds,
                )
                result = unwrap_generation_response(response)
                if result["summary"] is None:
                    raise ShapeMismatchError(field_key="summary", message="Generation returned no summary text.")
                summary = result["summary"].strip()
                if not self.pending_registry.is_current(request):
                    raise StaleTargetError(
                        field_key="summary",
                        message=f"CV generation #{request.request_id} was superseded; its response was discarded.",
                    )

                if self.variant == "summary":
                    self.document_store.apply_patch(FieldPatch(key="summary", value=summary))
                    value = {"summary": summary}
                else:
                    preview = replace(self.document_store.get(), summary=summary)
                    content = self.renderer(self.snapshot_provider.snapshot(preview))
                    value = {"summary": summary, "handle": self.artifact_store.put(session_id, content)}
                request.status = RequestStatus.SUCCEEDED
        except asyncio.TimeoutError:
            error = GenerationTimeoutError(operation="generate CV", timeout_seconds=self.timeout_seconds)
            export_logger.warning(str(error))
            return Outcome.failure(error)
        except OSError as e:
            error = NetworkFailureError(str(e))
            export_logger.warning(f"CV generation lost its connection: {e}")
            return Outcome.failure(error)
        except CVBuilderError as e:
            export_logger.warning(f"CV generation failed [{e.code}]: {e}")
            return Outcome.failure(e)

        export_logger.info("CV generation finished.")
        return Outcome.success(value)
