"""test_pending_registry.py
Run tests on PendingRegistry
"""
import pytest

from cv_builder.exceptions import AlreadyInProgressError
from cv_builder.models import RequestStatus
from cv_builder.profile_classes.regeneration.pending_registry import PendingRegistry


def test_hold_marks_and_releases():
    registry = PendingRegistry()
    with registry.hold("summary") as request:
        assert registry.is_pending("summary")
        assert registry.pending_requests() == [request]
    assert not registry.is_pending("summary")
    assert request.status == RequestStatus.FAILED


def test_hold_keeps_succeeded_status():
    registry = PendingRegistry()
    with registry.hold("skills") as request:
        request.status = RequestStatus.SUCCEEDED
    assert request.status == RequestStatus.SUCCEEDED


def test_duplicate_hold_is_rejected():
    registry = PendingRegistry()
    with registry.hold("experience", 0):
        with pytest.raises(AlreadyInProgressError):
            with registry.hold("experience", 0):
                pass
        # The rejected attempt must not release the original marker
        assert registry.is_pending("experience", 0)


def test_different_keys_are_independent():
    registry = PendingRegistry()
    with registry.hold("experience", 0), registry.hold("experience", 1), registry.hold("summary"):
        assert len(registry.pending_requests()) == 3


def test_marker_released_on_exception():
    registry = PendingRegistry()
    with pytest.raises(RuntimeError):
        with registry.hold("summary"):
            raise RuntimeError("boom")
    assert not registry.is_pending("summary")


def test_request_ids_increase():
    registry = PendingRegistry()
    with registry.hold("summary") as first:
        pass
    with registry.hold("summary") as second:
        pass
    assert second.request_id > first.request_id


# -----------------------------
# Whole-document holds
# -----------------------------
def test_document_hold_rejected_while_field_pending():
    registry = PendingRegistry()
    with registry.hold("summary"):
        with pytest.raises(AlreadyInProgressError):
            with registry.hold_document():
                pass


def test_field_hold_rejected_while_document_held():
    registry = PendingRegistry()
    with registry.hold_document():
        assert registry.is_document_pending()
        assert registry.pending_requests() == []
        with pytest.raises(AlreadyInProgressError):
            with registry.hold("skills"):
                pass
    assert not registry.is_document_pending()


# -----------------------------
# clear
# -----------------------------
def test_clear_makes_in_flight_requests_stale():
    registry = PendingRegistry()
    with registry.hold("summary") as request:
        registry.clear()
        assert not registry.is_current(request)
        assert request.status == RequestStatus.FAILED
        # A new request may start for the same key right away
        with registry.hold("summary") as newer:
            assert registry.is_current(newer)
    assert not registry.is_pending("summary")


def test_stale_request_does_not_release_newer_marker():
    registry = PendingRegistry()
    outer = registry.hold("summary")
    stale = outer.__enter__()
    registry.clear()
    with registry.hold("summary") as newer:
        outer.__exit__(None, None, None)
        assert registry.is_current(newer)
    assert stale.status == RequestStatus.FAILED
