"""document_store.py
Holds the single canonical ProfileDocument of an editing session.
"""
from dataclasses import asdict
from typing import Any, Callable, List, Mapping, Optional

from cv_builder.exceptions import ShapeMismatchError, StaleTargetError
from cv_builder.models import (
    FIELD_ALIASES,
    STRUCTURED_LIST_FIELDS,
    LIST_FIELDS,
    ProfileDocument,
    coerce_item,
)
from cv_builder.profile_classes.patches.profile_patch import (
    ProfilePatch,
    FieldPatch,
    IndexedItemPatch,
    FullDocumentPatch,
)

Observer = Callable[[ProfileDocument], None]


class DocumentStore:
    """
    Owns the current ProfileDocument and applies every change to it.

    All writes go through a patch: the new document is fully built and
    validated before it replaces the current one, so a failed write never
    leaves the document half-updated. Observers (e.g. a live preview) are
    notified synchronously after every successful write.

    Attributes:
        has_user_edits (bool): True once the user changed any field this session.
        is_established (bool): True once a document was loaded from a source,
            the sample or a full replace.
    """

    def __init__(self, document: Optional[ProfileDocument] = None):
        """
        Args:
            document (Optional[ProfileDocument]): Initial document. The store
                counts as established only when one is given.
        """
        self._document: ProfileDocument = document.copy() if document else ProfileDocument()
        self._observers: List[Observer] = []
        self.has_user_edits: bool = False
        self.is_established: bool = document is not None

    # ----------------------
    # READS
    # ----------------------
    def get(self) -> ProfileDocument:
        """Return the current document. Callers must not mutate it in place."""
        return self._document

    # ----------------------
    # WRITES
    # ----------------------
    def replace_field(self, key: str, value: Any, by_user: bool = True) -> None:
        """
        Replace a single field, last write wins.

        Raises:
            ShapeMismatchError: If `value` does not match the field's declared shape.
        """
        self.apply_patch(FieldPatch(key=key, value=value))
        if by_user:
            self.has_user_edits = True

    def update_item(self, key: str, index: int, changes: Mapping[str, str], by_user: bool = True) -> None:
        """
        Change sub-fields of one structured list item (e.g. `experience[0].title`).

        Raises:
            ShapeMismatchError: On unknown fields or non-string values.
            StaleTargetError: If there is no item at `index`.
        """
        self.apply_patch(IndexedItemPatch(key=key, index=index, changes=changes))
        if by_user:
            self.has_user_edits = True

    def add_item(self, key: str, item: Any = None) -> None:
        """Append an item to a list field; structured lists get a blank item by default."""
        key = FIELD_ALIASES.get(key, key)
        if key not in LIST_FIELDS:
            raise ShapeMismatchError(field_key=key, message=f"`{key}` is not a list field.")
        items = list(getattr(self._document, key))
        if key in STRUCTURED_LIST_FIELDS:
            items.append(coerce_item(key, item if item is not None else {}))
            items = [asdict(existing) for existing in items]
        else:
            items.append(item if item is not None else "")
        self.replace_field(key, items)

    def remove_item(self, key: str, index: int) -> None:
        """
        Remove the item at `index` from a list field.

        Raises:
            StaleTargetError: If there is no item at `index`.
        """
        key = FIELD_ALIASES.get(key, key)
        if key not in LIST_FIELDS:
            raise ShapeMismatchError(field_key=key, message=f"`{key}` is not a list field.")
        items = list(getattr(self._document, key))
        if not 0 <= index < len(items):
            raise StaleTargetError(field_key=key, index=index)
        del items[index]
        if key in STRUCTURED_LIST_FIELDS:
            items = [asdict(existing) for existing in items]
        self.replace_field(key, items)

    def replace_all(self, document: ProfileDocument) -> None:
        """Atomically swap the whole document."""
        self.apply_patch(FullDocumentPatch(document=document))
        self.is_established = True

    def reset(self, document: ProfileDocument) -> None:
        """Replace the document and forget that the user edited anything (logout/clear)."""
        self.replace_all(document)
        self.has_user_edits = False

    def apply_patch(self, patch: ProfilePatch) -> None:
        """
        Apply any ProfilePatch. The patch is validated and the new document
        built before the swap; observers run after it.

        Raises:
            ShapeMismatchError: If `patch` is not a ProfilePatch.
            StaleTargetError: If an IndexedItemPatch targets a missing item.
        """
        if not isinstance(patch, (FieldPatch, IndexedItemPatch, FullDocumentPatch)):
            raise ShapeMismatchError(
                field_key="patch",
                message=f"Unsupported patch type {type(patch).__name__}."
            )
        self._document = patch.apply(self._document)
        self._notify()

    # ----------------------
    # OBSERVERS
    # ----------------------
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register `observer`, called with the new document after each write.

        Returns:
            Callable[[], None]: Function that unsubscribes the observer.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self._document)
