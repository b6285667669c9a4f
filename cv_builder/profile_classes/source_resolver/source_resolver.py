"""source_resolver.py
Folds externally obtained profiles (imported identity profile, built-in sample)
into the DocumentStore without discarding the user's own edits.
"""
from dataclasses import fields
from typing import Any, Dict, List, Mapping, Optional, Union

from cv_builder.logging import LoggerFactory
from cv_builder.exceptions import CVBuilderError, SourceUnavailableError
from cv_builder.models import (
    FIELD_ALIASES,
    LIST_FIELDS,
    IdentityProfile,
    Outcome,
    ProfileDocument,
    coerce_field_value,
    is_blank,
)
from cv_builder.data.sample_profile import build_sample_profile
from cv_builder.profile_classes.document_store.document_store import DocumentStore
from cv_builder.profile_classes.source_resolver.helpers.identity_conversion import (
    identity_to_partial,
    document_to_partial,
)

# Load source resolution specific logger
logger_factory = LoggerFactory()
source_logger = logger_factory.get_logger(
    name="source_resolver",
    logger_type="source"
)


class SourceResolver:
    """
    Applies the import precedence rules, evaluated per field:

        1. Before the user edited anything, the incoming value wins.
        2. After user edits, a scalar is only filled in when it is currently blank.
        3. A list field is replaced wholesale only by a non-empty incoming list.
        4. Fields the source does not supply are left untouched.

    Blank incoming scalars count as "not supplied" (identity sources send ""
    for what they do not know). The merged document is written with a single
    `replace_all`, which is not counted as a user edit.

    Attributes:
        document_store (DocumentStore): Store holding the session's document.
    """

    def __init__(self, document_store: DocumentStore):
        self.document_store = document_store

    def resolve(self, payload: Optional[Union[IdentityProfile, Mapping[str, Any]]]) -> Outcome:
        """
        Fold an imported identity profile into the document.

        Args:
            payload (IdentityProfile | Mapping | None): The identity payload, or
                None when the identity source returned nothing.

        Returns:
            Outcome: On success `value` is the list of fields that changed. On a
                missing payload the outcome fails with SourceUnavailableError and
                the sample document is installed if nothing was established yet.
        """
        if payload is None:
            store = self.document_store
            if not store.is_established and not store.has_user_edits:
                self.document_store.reset(build_sample_profile())
                source_logger.info("No imported profile; falling back to the sample document.")
            source_logger.warning("Identity source returned no profile; nothing merged.")
            return Outcome.failure(SourceUnavailableError())

        try:
            partial = identity_to_partial(payload)
            return self._merge(partial, source_name="identity")
        except CVBuilderError as e:
            source_logger.warning(f"Imported profile rejected: {e}")
            return Outcome.failure(e)

    def resolve_sample(self) -> Outcome:
        """Fold the built-in sample document in, using the same precedence rules."""
        if not self.document_store.is_established and not self.document_store.has_user_edits:
            self.document_store.reset(build_sample_profile())
            source_logger.info("Sample document installed.")
            return Outcome.success([f.name for f in fields(ProfileDocument)])
        return self._merge(document_to_partial(build_sample_profile()), source_name="sample")

    def _merge(self, partial: Dict[str, Any], source_name: str) -> Outcome:
        """
        Merge `partial` into the current document following the precedence rules.

        Raises:
            ShapeMismatchError: If an incoming value has the wrong shape. Raised
                before anything is written.
        """
        store = self.document_store
        user_edited = store.has_user_edits
        # Start from the sample when nothing was established and nothing typed yet
        if store.is_established or user_edited:
            base = store.get().copy()
        else:
            base = build_sample_profile()

        merged = {key: getattr(base, key) for key in (f.name for f in fields(ProfileDocument))}
        changed: List[str] = []

        for raw_key, raw_value in partial.items():
            key = FIELD_ALIASES.get(raw_key, raw_key)
            incoming = coerce_field_value(key, raw_value)
            current = merged[key]

            if key in LIST_FIELDS:
                if not incoming:
                    continue
            else:
                if is_blank(incoming):
                    continue
                if user_edited and not is_blank(current):
                    continue

            if incoming != current:
                merged[key] = incoming
                changed.append(key)

        store.replace_all(ProfileDocument(**merged))
        source_logger.info(f"Merged {source_name} profile; changed fields: {changed or 'none'}")
        return Outcome.success(changed)
