"""test_tailoring_engine.py
Run tests on TailoringEngine
"""
import asyncio

import pytest

from cv_builder.exceptions import (
    AlreadyInProgressError,
    GenerationTimeoutError,
    MissingInputError,
    NetworkFailureError,
    RemoteFailureError,
    ShapeMismatchError,
    StaleTargetError,
)
from cv_builder.models import ProfileDocument, SessionContext
from cv_builder.profile_classes.document_store.document_store import DocumentStore
from cv_builder.profile_classes.regeneration.pending_registry import PendingRegistry
from cv_builder.profile_classes.regeneration.regeneration_coordinator import FieldRegenerationCoordinator
from cv_builder.profile_classes.tailoring.tailoring_engine import TailoringEngine
from cv_builder.test_helpers.dummy_classes import ScriptedGenerator
from cv_builder.test_helpers.dummy_variables.dummy_profiles import (
    MOCK_DOCUMENT_DICT,
    MOCK_TAILORED_DOCUMENT,
    OK_SUMMARY_ENVELOPE,
    OK_TAILORING_ENVELOPE,
    FAILED_TAILORING_ENVELOPE,
)


def make_engine(generator, timeout_seconds=5.0, registry=None):
    store = DocumentStore(ProfileDocument.from_dict(MOCK_DOCUMENT_DICT))
    engine = TailoringEngine(
        document_store=store,
        generator=generator,
        session=SessionContext(session_id="session-1", authenticated=True),
        pending_registry=registry or PendingRegistry(),
        timeout_seconds=timeout_seconds,
    )
    return engine, store


@pytest.mark.parametrize("job_title", ["", "   ", None])
def test_blank_title_is_missing_input(job_title):
    generator = ScriptedGenerator({"tailor_document": OK_TAILORING_ENVELOPE})
    engine, store = make_engine(generator)

    outcome = asyncio.run(engine.tailor(job_title))

    assert isinstance(outcome.error, MissingInputError)
    assert generator.calls == []


def test_tailoring_replaces_whole_document():
    generator = ScriptedGenerator({"tailor_document": OK_TAILORING_ENVELOPE})
    engine, store = make_engine(generator)

    outcome = asyncio.run(engine.tailor("  Platform Engineer "))

    assert outcome.succeeded is True
    assert store.get().to_dict() == MOCK_TAILORED_DOCUMENT
    assert outcome.value == store.get()
    _, context = generator.calls[0]
    assert context.job_title == "Platform Engineer"
    assert context.document.to_dict() == MOCK_DOCUMENT_DICT


def test_tailoring_establishes_a_fresh_store():
    generator = ScriptedGenerator({"tailor_document": OK_TAILORING_ENVELOPE})
    store = DocumentStore()
    engine = TailoringEngine(
        document_store=store,
        generator=generator,
        session=SessionContext(session_id="session-1", authenticated=True),
        pending_registry=PendingRegistry(),
    )

    asyncio.run(engine.tailor("Platform Engineer"))

    assert store.is_established is True
    assert store.has_user_edits is False
    assert store.get().to_dict() == MOCK_TAILORED_DOCUMENT


def test_tailoring_sends_given_document():
    generator = ScriptedGenerator({"tailor_document": OK_TAILORING_ENVELOPE})
    engine, _ = make_engine(generator)

    asyncio.run(engine.tailor("Lead", current_document=ProfileDocument(full_name="Other")))

    _, context = generator.calls[0]
    assert context.document.full_name == "Other"


@pytest.mark.parametrize("envelope,error", [
    (FAILED_TAILORING_ENVELOPE, RemoteFailureError),
    ({"success": True, "tailoredDocument": {"skills": "Go"}}, ShapeMismatchError),
    ({"success": True}, ShapeMismatchError),
])
def test_failed_tailoring_leaves_document(envelope, error):
    generator = ScriptedGenerator({"tailor_document": envelope})
    engine, store = make_engine(generator)

    outcome = asyncio.run(engine.tailor("Lead"))

    assert isinstance(outcome.error, error)
    assert store.get().to_dict() == MOCK_DOCUMENT_DICT
    assert engine.is_tailoring is False


def test_tailoring_timeout():
    generator = ScriptedGenerator(hold_responses=True)
    engine, store = make_engine(generator, timeout_seconds=0.05)

    outcome = asyncio.run(engine.tailor("Lead"))

    assert isinstance(outcome.error, GenerationTimeoutError)
    assert store.get().to_dict() == MOCK_DOCUMENT_DICT
    assert engine.is_tailoring is False


def test_dropped_connection_is_a_network_failure():
    generator = ScriptedGenerator({"tailor_document": ConnectionError("reset by peer")})
    engine, store = make_engine(generator)

    outcome = asyncio.run(engine.tailor("Lead"))

    assert isinstance(outcome.error, NetworkFailureError)
    assert store.get().to_dict() == MOCK_DOCUMENT_DICT
    assert engine.is_tailoring is False


# -----------------------------
# Serialization with field regeneration
# -----------------------------
def test_tailoring_refused_while_regeneration_pending():
    async def scenario():
        generator = ScriptedGenerator(hold_responses=True)
        registry = PendingRegistry()
        engine, store = make_engine(generator, registry=registry)
        coordinator = FieldRegenerationCoordinator(
            document_store=store,
            generator=generator,
            session=engine.session,
            pending_registry=registry,
        )
        regeneration = asyncio.create_task(coordinator.regenerate("summary"))
        await generator.wait_for_calls(1)

        tailoring = await engine.tailor("Lead")
        generator.release(OK_SUMMARY_ENVELOPE)
        return tailoring, await regeneration

    tailoring, regeneration = asyncio.run(scenario())

    assert isinstance(tailoring.error, AlreadyInProgressError)
    assert regeneration.succeeded is True


def test_regeneration_refused_while_tailoring():
    async def scenario():
        generator = ScriptedGenerator(hold_responses=True)
        registry = PendingRegistry()
        engine, store = make_engine(generator, registry=registry)
        coordinator = FieldRegenerationCoordinator(
            document_store=store,
            generator=generator,
            session=engine.session,
            pending_registry=registry,
        )
        tailoring = asyncio.create_task(engine.tailor("Platform Engineer"))
        await generator.wait_for_calls(1)
        assert engine.is_tailoring is True

        regeneration = await coordinator.regenerate("summary")
        generator.release(OK_TAILORING_ENVELOPE)
        return await tailoring, regeneration, store.get()

    tailoring, regeneration, document = asyncio.run(scenario())

    assert tailoring.succeeded is True
    assert isinstance(regeneration.error, AlreadyInProgressError)
    assert document.title == "Platform Engineer"


def test_cleared_registry_discards_tailored_document():
    async def scenario():
        generator = ScriptedGenerator(hold_responses=True)
        engine, store = make_engine(generator)
        task = asyncio.create_task(engine.tailor("Lead"))
        await generator.wait_for_calls(1)

        engine.pending_registry.clear()
        generator.release(OK_TAILORING_ENVELOPE)
        return await task, store.get()

    outcome, document = asyncio.run(scenario())

    assert isinstance(outcome.error, StaleTargetError)
    assert document.to_dict() == MOCK_DOCUMENT_DICT
