"""profile_generator.py
Holds the abstract ProfileGenerator, the boundary to the external generation service.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from cv_builder.models import ProfileDocument


@dataclass(frozen=True)
class RegenerationContext:
    """
    Everything a generator gets for a single-field regeneration.

    Attributes:
        session_id (Optional[str]): Session the request belongs to.
        field_key (str): "summary", "skills" or "experience".
        index (Optional[int]): Item index for an indexed `experience` request.
        target (Any): Snapshot of the targeted slice taken at dispatch time
            (the single item for indexed requests, the whole field otherwise).
        context (Dict[str, Any]): Other document fields the generator may use
            (title, phone, full_name, skills).
    """
    session_id: Optional[str]
    field_key: str
    index: Optional[int]
    target: Any
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TailoringContext:
    """Input of a whole-document rewrite against a target job title."""
    session_id: Optional[str]
    job_title: str
    document: ProfileDocument


@dataclass(frozen=True)
class GenerationPayload:
    """
    Input of full CV generation.

    Attributes:
        name (str): Full name on the document.
        title (str): Target job title.
        skills (str): Comma separated skills.
        experience_text (str): "Title at Company (Years): Description" entries joined by "; ".
        phone (str): Phone number.
        style (str): Desired tone/style of the generated text.
    """
    name: str
    title: str
    skills: str
    experience_text: str
    phone: str = ""
    style: str = "minimal"


class ProfileGenerator(ABC):
    """
    Abstract external generator. Implementations return response envelopes
    and raise `NetworkFailureError` on transport failures; they never touch
    the document.

    Envelopes:
        regenerate_field -> {"status": "ok", "data": ...} | {"status": "error", "error": str, "code"?: str}
        tailor_document  -> {"success": True, "tailoredDocument": {...}} | {"success": False, "error": str}
        generate_cv      -> {"success": True, "summary": str} | {"success": False, "error": str}
    """

    @abstractmethod
    async def regenerate_field(self, context: RegenerationContext) -> Dict[str, Any]:
        """Rewrite one field (or one indexed item) of the document."""

    @abstractmethod
    async def tailor_document(self, context: TailoringContext) -> Dict[str, Any]:
        """Rewrite the whole document for `context.job_title`."""

    @abstractmethod
    async def generate_cv(self, payload: GenerationPayload) -> Dict[str, Any]:
        """Generate the professional summary used for a full CV."""
