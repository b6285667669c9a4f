"""server.py
Server to launch a FastAPI / Swagger UI instance for the CV builder.
"""
from dataclasses import asdict
from typing import Any, Dict, Optional

from fastapi import Body, Cookie, FastAPI, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from cv_builder.exceptions import (
    CVBuilderError,
    UnauthorizedError,
    AlreadyInProgressError,
    StaleTargetError,
    SourceUnavailableError,
    ShapeMismatchError,
    MissingInputError,
    GenerationTimeoutError,
    RateLimitedError,
    QuotaExhaustedError,
    RemoteFailureError,
    NetworkFailureError,
    ExportNotReadyError,
    ExportRetrievalError,
)
from cv_builder.models import Outcome
from cv_builder.profile_classes.generator.llm_profile_generator import LLMProfileGenerator
from cv_builder.profile_classes.session.editing_session import EditingSession
from cv_builder.profile_classes.session.session_manager import SessionManager


app = FastAPI(title="CV Builder API", version="1.0")

SESSION_COOKIE = "session_id"

# Most specific class wins (looked up along the error's MRO)
ERROR_STATUS_CODES: Dict[type, int] = {
    UnauthorizedError: 401,
    AlreadyInProgressError: 409,
    StaleTargetError: 409,
    SourceUnavailableError: 404,
    ShapeMismatchError: 422,
    MissingInputError: 400,
    GenerationTimeoutError: 504,
    RateLimitedError: 429,
    QuotaExhaustedError: 402,
    RemoteFailureError: 502,
    NetworkFailureError: 503,
    ExportNotReadyError: 404,
    ExportRetrievalError: 500,
}

# Initiate SessionManager for use when server calls
session_manager = SessionManager(generator_factory=LLMProfileGenerator)


# ----------------------
# REQUEST MODELS
# ----------------------
class SessionInputs(BaseModel):
    sessionId: Optional[str] = None

class FieldValueInputs(SessionInputs):
    value: Any

class ItemChangesInputs(SessionInputs):
    changes: Dict[str, str]

class NewItemInputs(SessionInputs):
    item: Optional[Any] = None

class RegenerateInputs(SessionInputs):
    fieldKey: str
    index: Optional[int] = None

class TailorInputs(SessionInputs):
    jobTitle: Optional[str] = None


# ----------------------
# HELPERS
# ----------------------
def status_code_for(error: CVBuilderError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


def _resolve_session(cookie_session_id: Optional[str], inputs: Optional[SessionInputs] = None) -> EditingSession:
    """Find the caller's session from the cookie (or body `sessionId`), creating an anonymous one if needed."""
    session_id = cookie_session_id or (inputs.sessionId if inputs is not None else None)
    return session_manager.get_or_create(session_id)


def _json(session: Optional[EditingSession], content: Any, status_code: int = 200) -> JSONResponse:
    response = JSONResponse(content=content, status_code=status_code)
    if session is not None:
        response.set_cookie(SESSION_COOKIE, session.session.session_id, httponly=True, samesite="lax")
    return response


def _error(session: Optional[EditingSession], error: CVBuilderError) -> JSONResponse:
    return _json(
        session,
        {"error": error.user_message, "code": error.code, "detail": error.message},
        status_code=status_code_for(error),
    )


def _document_response(session: EditingSession, outcome: Outcome) -> JSONResponse:
    if not outcome.succeeded:
        return _error(session, outcome.error)
    return _json(session, {"document": session.document.to_dict()})


# ----------------------
# SESSION & SOURCES
# ----------------------
@app.post(
    "/api/session",
    summary="Open an authenticated session for an imported identity profile",
    description="Stands in for the OAuth callback: stores the identity profile and issues the session cookie.",
)
async def open_session(identity: Dict[str, Any] = Body(...)) -> JSONResponse:
    try:
        session = session_manager.login(identity)
    except CVBuilderError as e:
        return _error(None, e)
    return _json(session, {"sessionId": session.session.session_id, "authenticated": True})


@app.get("/api/profile", summary="Return the imported identity profile of the session")
async def get_profile(session_id: Optional[str] = Cookie(default=None)) -> JSONResponse:
    session = session_manager.get(session_id)
    if session is None or not session.session.is_authorized:
        return _error(None, UnauthorizedError())
    profile = await session_manager.identity_provider.fetch_profile(session_id)
    if profile is None:
        return _error(session, UnauthorizedError())
    return _json(session, asdict(profile))


@app.post("/api/profile/load", summary="Fold the imported identity profile into the document")
async def load_profile(
    inputs: Optional[SessionInputs] = None,
    session_id: Optional[str] = Cookie(default=None),
) -> JSONResponse:
    session = _resolve_session(session_id, inputs)
    outcome = await session.load_imported_profile()
    if not outcome.succeeded:
        return _error(session, outcome.error)
    return _json(session, {"changed": outcome.value, "document": session.document.to_dict()})


@app.post("/api/profile/sample", summary="Load the built-in sample document")
async def load_sample(
    inputs: Optional[SessionInputs] = None,
    session_id: Optional[str] = Cookie(default=None),
) -> JSONResponse:
    session = _resolve_session(session_id, inputs)
    outcome = session.select_sample()
    if not outcome.succeeded:
        return _error(session, outcome.error)
    return _json(session, {"changed": outcome.value, "document": session.document.to_dict()})


# ----------------------
# DOCUMENT EDITING
# ----------------------
@app.get("/api/document", summary="Return the session's current document")
async def get_document(session_id: Optional[str] = Cookie(default=None)) -> JSONResponse:
    session = _resolve_session(session_id)
    return _json(session, {"document": session.document.to_dict()})


@app.put("/api/document/{field}", summary="Replace one field of the document")
async def replace_field(
    field: str,
    inputs: FieldValueInputs,
    session_id: Optional[str] = Cookie(default=None),
) -> JSONResponse:
    session = _resolve_session(session_id, inputs)
    return _document_response(session, session.edit_field(field, inputs.value))


@app.patch("/api/document/{field}/{index}", summary="Change sub-fields of one list item")
async def update_item(
    field: str,
    index: int,
    inputs: ItemChangesInputs,
    session_id: Optional[str] = Cookie(default=None),
) -> JSONResponse:
    session = _resolve_session(session_id, inputs)
    return _document_response(session, session.edit_item(field, index, inputs.changes))


@app.post("/api/document/{field}", summary="Append an item to a list field")
async def add_item(
    field: str,
    inputs: Optional[NewItemInputs] = None,
    session_id: Optional[str] = Cookie(default=None),
) -> JSONResponse:
    session = _resolve_session(session_id, inputs)
    return _document_response(session, session.add_item(field, inputs.item if inputs is not None else None))


@app.delete("/api/document/{field}/{index}", summary="Remove one item from a list field")
async def remove_item(
    field: str,
    index: int,
    session_id: Optional[str] = Cookie(default=None),
) -> JSONResponse:
    session = _resolve_session(session_id)
    return _document_response(session, session.remove_item(field, index))


# ----------------------
# GENERATION
# ----------------------
@app.post(
    "/api/regenerate",
    summary="Regenerate one field (or one experience item) of the document",
    description="Requires an authenticated session. Only the targeted field is rewritten.",
)
async def regenerate(inputs: RegenerateInputs, session_id: Optional[str] = Cookie(default=None)) -> JSONResponse:
    session = _resolve_session(session_id, inputs)
    outcome = await session.regenerate(inputs.fieldKey, inputs.index)
    if not outcome.succeeded:
        return _error(session, outcome.error)
    return _json(session, {"value": outcome.value, "document": session.document.to_dict()})


@app.post("/api/tailor", summary="Rewrite the whole document for a target job title")
async def tailor(
    inputs: Optional[TailorInputs] = None,
    session_id: Optional[str] = Cookie(default=None),
) -> JSONResponse:
    session = _resolve_session(session_id, inputs)
    outcome = await session.tailor(inputs.jobTitle if inputs is not None else None)
    if not outcome.succeeded:
        return _error(session, outcome.error)
    return _json(session, {"document": outcome.value.to_dict()})


@app.post("/generate_cv", summary="Generate the full CV from the current document")
async def generate_cv(
    inputs: Optional[SessionInputs] = None,
    session_id: Optional[str] = Cookie(default=None),
) -> JSONResponse:
    session = _resolve_session(session_id, inputs)
    outcome = await session.generate_cv()
    if not outcome.succeeded:
        return _error(session, outcome.error)

    content: Dict[str, Any] = {"success": True, "summary": outcome.value["summary"]}
    if "handle" in outcome.value:
        content["download_url"] = f"/download_cv?handle={outcome.value['handle']}"
    return _json(session, content)


# ----------------------
# EXPORT
# ----------------------
@app.get("/download_cv", summary="Download the generated CV")
async def download_cv(
    handle: Optional[str] = Query(default=None),
    session_id: Optional[str] = Cookie(default=None),
) -> Response:
    session = _resolve_session(session_id)
    outcome = session.retrieve_export(handle)
    if not outcome.succeeded:
        return _error(session, outcome.error)
    return Response(
        content=outcome.value,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="cv.txt"'},
    )


@app.get("/api/snapshot", summary="Return the export snapshot of the current document")
async def get_snapshot(session_id: Optional[str] = Cookie(default=None)) -> JSONResponse:
    session = _resolve_session(session_id)
    snapshot = session.snapshot()
    return _json(session, {
        "document": snapshot.document.to_dict(),
        "visibleSections": list(snapshot.visible_sections),
    })


@app.post("/logout", summary="End the session and reset the document to the sample")
async def logout(
    inputs: Optional[SessionInputs] = None,
    session_id: Optional[str] = Cookie(default=None),
) -> JSONResponse:
    session = session_manager.get(session_id or (inputs.sessionId if inputs is not None else None))
    if session is not None:
        await session.logout()
        session_manager.drop(session.session.session_id)
    response = JSONResponse(content={"success": True})
    response.delete_cookie(SESSION_COOKIE)
    return response
