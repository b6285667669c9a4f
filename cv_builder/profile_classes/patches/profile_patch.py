"""profile_patch.py
Closed set of patch types that can be applied to a ProfileDocument.

    ProfilePatch = FieldPatch | IndexedItemPatch | FullDocumentPatch

Every patch validates its payload against `FIELD_SHAPES` when it is built, so
an invalid value is rejected with `ShapeMismatchError` before it ever reaches
the DocumentStore.
"""
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Union

from cv_builder.exceptions import ShapeMismatchError, StaleTargetError
from cv_builder.models import (
    FIELD_ALIASES,
    STRUCTURED_LIST_FIELDS,
    ProfileDocument,
    coerce_field_value,
)


@dataclass(frozen=True)
class FieldPatch:
    """Replace exactly one field (scalar or whole list) of the document."""
    key: str
    value: Any

    def __post_init__(self):
        key = FIELD_ALIASES.get(self.key, self.key)
        object.__setattr__(self, "key", key)
        object.__setattr__(self, "value", coerce_field_value(key, self.value))

    def apply(self, document: ProfileDocument) -> ProfileDocument:
        return replace(document, **{self.key: coerce_field_value(self.key, self.value)})


@dataclass(frozen=True)
class IndexedItemPatch:
    """
    Change sub-fields of one item of a structured list, addressed by position.

    Only the sub-fields named in `changes` are replaced; the rest of the item
    keeps whatever value it has when the patch is applied.
    """
    key: str
    index: int
    changes: Mapping[str, str]

    def __post_init__(self):
        if self.key not in STRUCTURED_LIST_FIELDS:
            raise ShapeMismatchError(
                field_key=self.key,
                message=f"`{self.key}` is not a structured list field."
            )
        if not isinstance(self.index, int) or isinstance(self.index, bool) or self.index < 0:
            raise ShapeMismatchError(
                field_key=self.key,
                message=f"Item index for `{self.key}` must be a non-negative integer, got {self.index!r}."
            )
        if not isinstance(self.changes, Mapping) or not self.changes:
            raise ShapeMismatchError(
                field_key=self.key,
                message=f"Changes for `{self.key}[{self.index}]` must be a non-empty object."
            )
        allowed = {f.name for f in fields(STRUCTURED_LIST_FIELDS[self.key])}
        for sub_key, sub_value in self.changes.items():
            if sub_key not in allowed:
                raise ShapeMismatchError(
                    field_key=self.key,
                    message=f"Unknown sub-field `{sub_key}` for `{self.key}`; allowed: {sorted(allowed)}."
                )
            if not isinstance(sub_value, str):
                raise ShapeMismatchError(
                    field_key=self.key,
                    message=f"`{self.key}[{self.index}].{sub_key}` must be a string."
                )
        object.__setattr__(self, "changes", dict(self.changes))

    def apply(self, document: ProfileDocument) -> ProfileDocument:
        """
        Raises:
            StaleTargetError: If the list no longer has an item at `index`.
        """
        items = list(getattr(document, self.key))
        if self.index >= len(items):
            raise StaleTargetError(field_key=self.key, index=self.index)
        items[self.index] = replace(items[self.index], **self.changes)
        return replace(document, **{self.key: items})


@dataclass(frozen=True)
class FullDocumentPatch:
    """Replace every field of the document."""
    document: ProfileDocument

    def __post_init__(self):
        if isinstance(self.document, Mapping):
            object.__setattr__(self, "document", ProfileDocument.from_dict(self.document))
        elif isinstance(self.document, ProfileDocument):
            # Re-validate field by field, dataclasses do not enforce types
            object.__setattr__(self, "document", ProfileDocument.from_dict(self.document.to_dict()))
        else:
            raise ShapeMismatchError(
                field_key="document",
                message=f"A full document patch needs a ProfileDocument, got {type(self.document).__name__}."
            )

    def apply(self, document: ProfileDocument) -> ProfileDocument:
        return self.document.copy()


ProfilePatch = Union[FieldPatch, IndexedItemPatch, FullDocumentPatch]


def _split_comma_list(text: str) -> list:
    """Split a comma-separated string the way the editing form does."""
    return [part.strip() for part in text.split(",") if part.strip()]


def build_regeneration_patch(field_key: str, index: Optional[int], data: Any) -> ProfilePatch:
    """
    Turn the `data` returned by a field regeneration into a field-scoped patch.

    Args:
        field_key (str): "summary", "skills" or "experience".
        index (Optional[int]): Target item for indexed `experience` regeneration.
        data (Any): Generator payload. Accepted shapes:
            - summary: str (or {"summary": str})
            - skills: List[str] or a comma separated str (or {"skills": ...})
            - experience: List[item] without index; for an index either a str
              (new description) or a mapping of sub-field changes.

    Returns:
        ProfilePatch: A FieldPatch or IndexedItemPatch, never a full document patch.

    Raises:
        ShapeMismatchError: If `data` does not fit the targeted field.
    """
    # Unwrap {"<field_key>": value} payloads
    if isinstance(data, Mapping) and set(data) == {field_key}:
        data = data[field_key]

    if field_key == "summary":
        if not isinstance(data, str):
            raise ShapeMismatchError(field_key=field_key, message="Regenerated summary must be text.")
        return FieldPatch(key="summary", value=data.strip())

    if field_key == "skills":
        if isinstance(data, str):
            data = _split_comma_list(data)
        return FieldPatch(key="skills", value=data)

    if field_key == "experience":
        if index is None:
            return FieldPatch(key="experience", value=data)
        if isinstance(data, str):
            return IndexedItemPatch(key="experience", index=index, changes={"description": data.strip()})
        if isinstance(data, Mapping):
            changes: Dict[str, Any] = {k: v for k, v in data.items() if v is not None}
            return IndexedItemPatch(key="experience", index=index, changes=changes)
        raise ShapeMismatchError(
            field_key=field_key,
            message=f"Regenerated `experience[{index}]` must be text or an object, got {type(data).__name__}."
        )

    raise ShapeMismatchError(field_key=field_key, message=f"`{field_key}` cannot be regenerated.")
