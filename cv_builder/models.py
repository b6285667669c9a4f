"""models.py
Holds standardized data models used across the profile components.
"""
import copy
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
from dataclasses import dataclass, field, fields, asdict

from cv_builder.exceptions import CVBuilderError, ShapeMismatchError


# --------------------------------------------------------------
# PROFILE DOCUMENT
# --------------------------------------------------------------
@dataclass
class Education:
    """A single education entry."""
    school: str = ""
    degree: str = ""
    years: str = ""


@dataclass
class Experience:
    """A single work experience entry."""
    title: str = ""
    company: str = ""
    years: str = ""
    description: str = ""


@dataclass
class Project:
    """A single project entry."""
    name: str = ""
    description: str = ""


SCALAR_FIELDS: Tuple[str, ...] = ("full_name", "title", "email", "phone", "location", "summary")
STRING_LIST_FIELDS: Tuple[str, ...] = ("skills", "languages")
STRUCTURED_LIST_FIELDS: Dict[str, type] = {
    "education": Education,
    "experience": Experience,
    "projects": Project,
}
LIST_FIELDS: Tuple[str, ...] = STRING_LIST_FIELDS + tuple(STRUCTURED_LIST_FIELDS)

# Declared shape of every ProfileDocument field. Patches are validated against this.
FIELD_SHAPES: Dict[str, Any] = {
    **{key: "scalar" for key in SCALAR_FIELDS},
    **{key: "string_list" for key in STRING_LIST_FIELDS},
    **STRUCTURED_LIST_FIELDS,
}

# Wire names accepted in addition to the attribute names
FIELD_ALIASES: Dict[str, str] = {
    "fullName": "full_name",
}


def coerce_item(field_key: str, value: Any) -> Any:
    """
    Convert `value` into the item type declared for the structured list `field_key`.

    Accepts an instance of the item type or a mapping holding a subset of its
    fields (missing fields default to ""). All sub-field values must be strings.

    Raises:
        ShapeMismatchError: If the value is not convertible.
    """
    item_type = STRUCTURED_LIST_FIELDS[field_key]
    if isinstance(value, item_type):
        value = asdict(value)
    if not isinstance(value, Mapping):
        raise ShapeMismatchError(
            field_key=field_key,
            message=f"Items of `{field_key}` must be {item_type.__name__} objects, got {type(value).__name__}."
        )
    allowed = {f.name for f in fields(item_type)}
    unknown = set(value) - allowed
    if unknown:
        raise ShapeMismatchError(
            field_key=field_key,
            message=f"Unknown {item_type.__name__} fields {sorted(unknown)}; allowed: {sorted(allowed)}."
        )
    for sub_key, sub_value in value.items():
        if not isinstance(sub_value, str):
            raise ShapeMismatchError(
                field_key=field_key,
                message=f"`{field_key}.{sub_key}` must be a string, got {type(sub_value).__name__}."
            )
    return item_type(**value)


def coerce_field_value(field_key: str, value: Any) -> Any:
    """
    Validate `value` against the declared shape of `field_key` and return a
    normalized, freshly-built copy of it.

    Args:
        field_key (str): A ProfileDocument attribute name (or accepted alias).
        value (Any): The proposed value.

    Returns:
        Any: `str` for scalar fields, `List[str]` for string lists and a list of
            item dataclasses for structured lists.

    Raises:
        ShapeMismatchError: If the field is unknown or the value has the wrong shape.
    """
    field_key = FIELD_ALIASES.get(field_key, field_key)
    shape = FIELD_SHAPES.get(field_key)
    if shape is None:
        raise ShapeMismatchError(field_key=field_key, message=f"Unknown profile field `{field_key}`.")

    if shape == "scalar":
        if not isinstance(value, str):
            raise ShapeMismatchError(
                field_key=field_key,
                message=f"`{field_key}` must be a string, got {type(value).__name__}."
            )
        return value

    # A bare string is a scalar, never a sequence here
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, (list, tuple)):
        raise ShapeMismatchError(
            field_key=field_key,
            message=f"`{field_key}` must be a list, got {type(value).__name__}."
        )

    if shape == "string_list":
        if not all(isinstance(item, str) for item in value):
            raise ShapeMismatchError(
                field_key=field_key,
                message=f"All entries of `{field_key}` must be strings."
            )
        return list(value)

    return [coerce_item(field_key, item) for item in value]


def is_blank(value: Any) -> bool:
    """True for empty/whitespace strings, empty lists and None."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


@dataclass
class ProfileDocument:
    """
    The canonical résumé document edited during a session.

    Structured list items have no identity of their own: they are addressed
    by their position in the list.
    """
    full_name: str = ""
    title: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""
    skills: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    experience: List[Experience] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProfileDocument":
        """
        Build a document from a JSON-like mapping. Missing fields take their
        defaults, `None` values are treated as missing.

        Raises:
            ShapeMismatchError: If `data` is not a mapping, names an unknown
                field or holds a value of the wrong shape.
        """
        if not isinstance(data, Mapping):
            raise ShapeMismatchError(
                field_key="document",
                message=f"A profile document must be an object, got {type(data).__name__}."
            )
        values = {}
        for key, value in data.items():
            if value is None:
                continue
            values[FIELD_ALIASES.get(key, key)] = coerce_field_value(key, value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Return a deep, JSON-ready copy of the document."""
        return asdict(self)

    def copy(self) -> "ProfileDocument":
        return copy.deepcopy(self)


# --------------------------------------------------------------
# IMPORTED IDENTITY PROFILE
# --------------------------------------------------------------
@dataclass
class IdentityProfile:
    """
    Profile payload returned by the identity service (e.g. an imported
    social-network profile). Never used as a ProfileDocument directly; it is
    always folded in by the SourceResolver.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    picture: Optional[str] = None
    title: Optional[str] = None
    location: Optional[str] = None
    summary: Optional[str] = None
    skills: Optional[List[str]] = None
    education: Optional[List[Dict[str, str]]] = None
    experience: Optional[List[Dict[str, str]]] = None

    ALIASES = {
        "firstName": "first_name",
        "lastName": "last_name",
        "fullName": "name",
        "headline": "title",
    }
    LIST_FIELDS = ("skills", "education", "experience")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IdentityProfile":
        """Build from an identity payload, ignoring fields this model does not know."""
        if not isinstance(data, Mapping):
            raise ShapeMismatchError(
                field_key="identity_profile",
                message=f"An identity profile must be an object, got {type(data).__name__}."
            )
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            key = cls.ALIASES.get(key, key)
            if key not in known:
                continue
            if value is not None:
                cls._check_type(key, value)
            values[key] = value
        return cls(**values)

    @classmethod
    def _check_type(cls, key: str, value: Any) -> None:
        if key in cls.LIST_FIELDS:
            if not isinstance(value, (list, tuple)):
                raise ShapeMismatchError(
                    field_key=key,
                    message=f"Identity field `{key}` must be a list, got {type(value).__name__}."
                )
        elif not isinstance(value, str):
            raise ShapeMismatchError(
                field_key=key,
                message=f"Identity field `{key}` must be a string, got {type(value).__name__}."
            )


# --------------------------------------------------------------
# REGENERATION REQUESTS
# --------------------------------------------------------------
class RequestStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class FieldRegenerationRequest:
    """
    One outstanding regeneration of `field_key` (or of item `index` within it).

    Attributes:
        field_key (str): "summary", "skills" or "experience".
        index (Optional[int]): Item index for structured list fields.
        status (RequestStatus): Lifecycle status of the request.
        request_id (int): Monotonic id, used to recognise superseded requests.
    """
    field_key: str
    index: Optional[int] = None
    status: RequestStatus = RequestStatus.PENDING
    request_id: int = 0

    @property
    def key(self) -> Tuple[str, Optional[int]]:
        return (self.field_key, self.index)


@dataclass
class SessionContext:
    """Identity of the active editing session."""
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    authenticated: bool = False

    @property
    def is_authorized(self) -> bool:
        return self.authenticated and bool(self.session_id)


# --------------------------------------------------------------
# OUTCOMES & SNAPSHOTS
# --------------------------------------------------------------
@dataclass
class Outcome:
    """
    Result of a component operation. Failures are reported here instead of
    being raised past the component boundary.

    Attributes:
        succeeded (bool): Whether the operation took effect.
        value (Any): Operation specific result (e.g. the regenerated value).
        error (Optional[CVBuilderError]): The failure, when `succeeded` is False.
    """
    succeeded: bool
    value: Any = None
    error: Optional[CVBuilderError] = None

    @classmethod
    def success(cls, value: Any = None) -> "Outcome":
        return cls(succeeded=True, value=value)

    @classmethod
    def failure(cls, error: CVBuilderError) -> "Outcome":
        return cls(succeeded=False, error=error)

    @property
    def message(self) -> Optional[str]:
        """Actionable message for the user, if the operation failed."""
        return self.error.user_message if self.error else None


@dataclass(frozen=True)
class ExportSnapshot:
    """
    Stable, read-only view handed to the rendering/export collaborator.

    Attributes:
        document (ProfileDocument): Deep copy of the document at snapshot time.
        visible_sections (Tuple[str, ...]): Sections that carry content.
    """
    document: ProfileDocument
    visible_sections: Tuple[str, ...] = ()

    def is_visible(self, section: str) -> bool:
        return section in self.visible_sections
