"""generator_responses.py
Unwrap the response envelopes returned by the generation endpoints.

Regeneration:  {"status": "ok", "data": ...} | {"status": "error", "error": str, "code"?: str}
Tailoring:     {"success": true, "tailoredDocument": {...}} | {"success": false, "error": str}
CV generation: {"success": true, "summary"?: str, "download_url"?: str} | {"success": false, "error": str}
"""
from typing import Any, Dict, Mapping, Optional

from cv_builder.exceptions import (
    RemoteFailureError,
    RateLimitedError,
    QuotaExhaustedError,
    ShapeMismatchError,
)

RATE_LIMIT_MARKERS = ["rate limit", "rate_limit", "too many requests", "429"]
QUOTA_MARKERS = ["insufficient_quota", "quota", "credits", "credit balance", "402"]


def remote_failure_from(message: Optional[str], code: Optional[str] = None) -> RemoteFailureError:
    """
    Build the most specific RemoteFailureError for an error reported by a remote service.

    `code` wins when present, otherwise the message text is inspected so that
    rate-limit and quota failures are reported separately from generic ones.
    """
    message = message or "Remote service returned an error"
    if code == RateLimitedError.code:
        return RateLimitedError(message)
    if code == QuotaExhaustedError.code:
        return QuotaExhaustedError(message)

    lowered = message.lower()
    if any(marker in lowered for marker in RATE_LIMIT_MARKERS):
        return RateLimitedError(message)
    if any(marker in lowered for marker in QUOTA_MARKERS):
        return QuotaExhaustedError(message)
    return RemoteFailureError(message)


def _require_mapping(response: Any, endpoint: str) -> Mapping[str, Any]:
    if not isinstance(response, Mapping):
        raise ShapeMismatchError(
            field_key=endpoint,
            message=f"Malformed {endpoint} response: expected an object, got {type(response).__name__}."
        )
    return response


def unwrap_regeneration_response(response: Any) -> Any:
    """
    Return the `data` of a successful regeneration envelope.

    Raises:
        RemoteFailureError: (or a subclass) for `{"status": "error"}` envelopes.
        ShapeMismatchError: If the envelope is malformed.
    """
    response = _require_mapping(response, "regeneration")
    status = response.get("status")
    if status == "ok":
        if "data" not in response or response["data"] is None:
            raise ShapeMismatchError(
                field_key="regeneration",
                message="Malformed regeneration response: `data` is missing."
            )
        return response["data"]
    if status == "error":
        raise remote_failure_from(response.get("error"), response.get("code"))
    raise ShapeMismatchError(
        field_key="regeneration",
        message=f"Malformed regeneration response: unknown status {status!r}."
    )


def unwrap_tailoring_response(response: Any) -> Dict[str, Any]:
    """
    Return the tailored document mapping of a successful tailoring envelope.

    Raises:
        RemoteFailureError: (or a subclass) for `{"success": false}` envelopes.
        ShapeMismatchError: If the envelope is malformed.
    """
    response = _require_mapping(response, "tailoring")
    if response.get("success") is True:
        document = response.get("tailoredDocument", response.get("tailored_data"))
        if not isinstance(document, Mapping):
            raise ShapeMismatchError(
                field_key="tailoring",
                message="Malformed tailoring response: `tailoredDocument` is missing."
            )
        return dict(document)
    if response.get("success") is False:
        raise remote_failure_from(response.get("error"), response.get("code"))
    raise ShapeMismatchError(
        field_key="tailoring",
        message="Malformed tailoring response: `success` flag is missing."
    )


def unwrap_generation_response(response: Any) -> Dict[str, Any]:
    """
    Return `{"summary": ..., "download_url": ...}` for a successful CV generation.

    Raises:
        RemoteFailureError: (or a subclass) for `{"success": false}` envelopes.
        ShapeMismatchError: If the envelope is malformed or carries neither a
            summary nor a download location.
    """
    response = _require_mapping(response, "generation")
    if response.get("success") is False:
        raise remote_failure_from(response.get("error"), response.get("code"))
    if response.get("success") is not True:
        raise ShapeMismatchError(
            field_key="generation",
            message="Malformed generation response: `success` flag is missing."
        )

    summary = response.get("summary")
    download_url = response.get("download_url")
    if summary is not None and not isinstance(summary, str):
        raise ShapeMismatchError(field_key="summary", message="Generated summary must be text.")
    if summary is None and download_url is None:
        raise ShapeMismatchError(
            field_key="generation",
            message="Malformed generation response: neither `summary` nor `download_url` given."
        )
    return {"summary": summary, "download_url": download_url}
