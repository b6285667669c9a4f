"""test_generator_responses.py
Test unwrapping of generator response envelopes.
"""
import pytest

from cv_builder.exceptions import (
    QuotaExhaustedError,
    RateLimitedError,
    RemoteFailureError,
    ShapeMismatchError,
)
from cv_builder.profile_classes.patches.generator_responses import (
    remote_failure_from,
    unwrap_regeneration_response,
    unwrap_tailoring_response,
    unwrap_generation_response,
)


@pytest.mark.parametrize("message,code,expected", [
    ("Rate limit exceeded", None, RateLimitedError),
    ("HTTP 429 Too Many Requests", None, RateLimitedError),
    ("AI credits exhausted", None, QuotaExhaustedError),
    ("anything", "quota_exhausted", QuotaExhaustedError),
    ("anything", "rate_limited", RateLimitedError),
    ("Model overloaded", None, RemoteFailureError),
])
def test_remote_failure_from(message, code, expected):
    assert type(remote_failure_from(message, code)) is expected


# -----------------------------
# Regeneration envelopes
# -----------------------------
def test_unwrap_regeneration_ok():
    assert unwrap_regeneration_response({"status": "ok", "data": "B"}) == "B"


def test_unwrap_regeneration_error_raises_classified_failure():
    with pytest.raises(RateLimitedError):
        unwrap_regeneration_response({"status": "error", "error": "rate limit"})


@pytest.mark.parametrize("response", [
    None,
    "ok",
    {"status": "ok"},
    {"status": "pending", "data": "B"},
])
def test_unwrap_regeneration_malformed(response):
    with pytest.raises(ShapeMismatchError):
        unwrap_regeneration_response(response)


# -----------------------------
# Tailoring envelopes
# -----------------------------
@pytest.mark.parametrize("key", ["tailoredDocument", "tailored_data"])
def test_unwrap_tailoring_ok(key):
    assert unwrap_tailoring_response({"success": True, key: {"title": "Lead"}}) == {"title": "Lead"}


def test_unwrap_tailoring_failure():
    with pytest.raises(RemoteFailureError):
        unwrap_tailoring_response({"success": False, "error": "Service unavailable"})


@pytest.mark.parametrize("response", [
    {"success": True},
    {"success": True, "tailoredDocument": "text"},
    {"tailoredDocument": {}},
])
def test_unwrap_tailoring_malformed(response):
    with pytest.raises(ShapeMismatchError):
        unwrap_tailoring_response(response)


# -----------------------------
# Generation envelopes
# -----------------------------
def test_unwrap_generation_ok():
    assert unwrap_generation_response({"success": True, "summary": "S"}) == {"summary": "S", "download_url": None}


def test_unwrap_generation_failure():
    with pytest.raises(QuotaExhaustedError):
        unwrap_generation_response({"success": False, "error": "Not enough credits"})


@pytest.mark.parametrize("response", [
    {"success": True},
    {"success": True, "summary": 3},
    {"summary": "S"},
])
def test_unwrap_generation_malformed(response):
    with pytest.raises(ShapeMismatchError):
        unwrap_generation_response(response)
