"""test_cv_generation.py
Run tests on CVGenerationService
"""
import asyncio

import pytest

from cv_builder.exceptions import (
    AlreadyInProgressError,
    ExportNotReadyError,
    GenerationTimeoutError,
    NetworkFailureError,
    RateLimitedError,
    ShapeMismatchError,
)
from cv_builder.models import ProfileDocument
from cv_builder.profile_classes.document_store.document_store import DocumentStore
from cv_builder.profile_classes.export.artifact_store import ExportArtifactStore
from cv_builder.profile_classes.export.cv_generation import CVGenerationService, build_generation_payload
from cv_builder.profile_classes.regeneration.pending_registry import PendingRegistry
from cv_builder.test_helpers.dummy_classes import ScriptedGenerator
from cv_builder.test_helpers.dummy_variables.dummy_profiles import (
    MOCK_DOCUMENT_DICT,
    OK_GENERATION_ENVELOPE,
    FAILED_GENERATION_ENVELOPE,
)


def make_service(generator, variant="summary", timeout_seconds=5.0):
    store = DocumentStore(ProfileDocument.from_dict(MOCK_DOCUMENT_DICT))
    artifacts = ExportArtifactStore()
    service = CVGenerationService(
        document_store=store,
        generator=generator,
        pending_registry=PendingRegistry(),
        artifact_store=artifacts,
        variant=variant,
        timeout_seconds=timeout_seconds,
    )
    return service, store, artifacts


def test_payload_flattens_document():
    payload = build_generation_payload(ProfileDocument.from_dict(MOCK_DOCUMENT_DICT))
    assert payload.name == "Jane Doe"
    assert payload.skills == "Go"
    assert payload.phone == "555-0100"
    assert payload.experience_text == (
        "X at Acme (2018-2024): Built pipelines.; Intern at Initech (2017): Wrote reports."
    )


def test_unknown_variant_rejected():
    with pytest.raises(ValueError):
        make_service(ScriptedGenerator(), variant="pdf")


def test_summary_variant_patches_summary_only():
    generator = ScriptedGenerator({"generate_cv": OK_GENERATION_ENVELOPE})
    service, store, artifacts = make_service(generator)

    outcome = asyncio.run(service.generate("s1"))

    assert outcome.value == {"summary": "Generated summary."}
    expected = dict(MOCK_DOCUMENT_DICT, summary="Generated summary.")
    assert store.get().to_dict() == expected
    with pytest.raises(ExportNotReadyError):
        artifacts.retrieve("s1")


def test_artifact_variant_stores_rendering_without_mutating():
    generator = ScriptedGenerator({"generate_cv": OK_GENERATION_ENVELOPE})
    service, store, artifacts = make_service(generator, variant="artifact")

    outcome = asyncio.run(service.generate("s1"))

    assert outcome.succeeded is True
    content = artifacts.retrieve("s1", outcome.value["handle"]).decode("utf-8")
    assert "SUMMARY\nGenerated summary." in content
    assert store.get().summary == "A"


@pytest.mark.parametrize("envelope,error", [
    (FAILED_GENERATION_ENVELOPE, RateLimitedError),
    ({"success": True, "download_url": "/download_cv"}, ShapeMismatchError),
])
def test_generation_failures(envelope, error):
    generator = ScriptedGenerator({"generate_cv": envelope})
    service, store, _ = make_service(generator)

    outcome = asyncio.run(service.generate("s1"))

    assert isinstance(outcome.error, error)
    assert store.get().summary == "A"
    assert not service.pending_registry.is_pending("summary")


def test_generation_timeout():
    generator = ScriptedGenerator(hold_responses=True)
    service, store, _ = make_service(generator, timeout_seconds=0.05)

    outcome = asyncio.run(service.generate("s1"))

    assert isinstance(outcome.error, GenerationTimeoutError)
    assert not service.pending_registry.is_pending("summary")


@pytest.mark.parametrize("variant", ["summary", "artifact"])
def test_dropped_connection_is_a_network_failure(variant):
    generator = ScriptedGenerator({"generate_cv": ConnectionError("reset by peer")})
    service, store, artifacts = make_service(generator, variant=variant)

    outcome = asyncio.run(service.generate("s1"))

    assert isinstance(outcome.error, NetworkFailureError)
    assert store.get().to_dict() == MOCK_DOCUMENT_DICT
    assert not service.pending_registry.is_pending("summary")
    with pytest.raises(ExportNotReadyError):
        artifacts.retrieve("s1")


def test_generation_refused_while_summary_regenerates():
    generator = ScriptedGenerator({"generate_cv": OK_GENERATION_ENVELOPE})
    service, store, _ = make_service(generator)

    with service.pending_registry.hold("summary"):
        outcome = asyncio.run(service.generate("s1"))

    assert isinstance(outcome.error, AlreadyInProgressError)
    assert generator.calls == []
