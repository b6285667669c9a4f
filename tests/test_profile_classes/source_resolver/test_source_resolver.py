"""test_source_resolver.py
Run tests on SourceResolver and the identity conversion helpers.
"""
import pytest

from cv_builder.exceptions import ShapeMismatchError, SourceUnavailableError
from cv_builder.models import IdentityProfile, ProfileDocument
from cv_builder.data.sample_profile import build_sample_profile
from cv_builder.profile_classes.document_store.document_store import DocumentStore
from cv_builder.profile_classes.source_resolver.source_resolver import SourceResolver
from cv_builder.profile_classes.source_resolver.helpers.identity_conversion import identity_to_partial
from cv_builder.test_helpers.dummy_variables.dummy_profiles import (
    MOCK_DOCUMENT_DICT,
    MOCK_IDENTITY_PAYLOAD,
)


def make_resolver(document=None):
    store = DocumentStore(document)
    return SourceResolver(store), store


# -----------------------------
# identity_to_partial
# -----------------------------
def test_identity_to_partial_combines_name_parts():
    partial = identity_to_partial(MOCK_IDENTITY_PAYLOAD)
    assert partial == {"full_name": "Ada Lovelace", "email": "ada@example.com", "title": "Architect"}


def test_identity_to_partial_prefers_full_name_and_skips_blanks():
    partial = identity_to_partial(IdentityProfile(name="Ada L.", first_name="Ada", title="  ", skills=[]))
    assert partial == {"full_name": "Ada L.", "skills": []}


def test_identity_to_partial_never_supplies_phone():
    partial = identity_to_partial({"name": "Ada", "phone": "555-0100"})
    assert "phone" not in partial


# -----------------------------
# resolve
# -----------------------------
def test_missing_payload_installs_sample_once():
    resolver, store = make_resolver()

    outcome = resolver.resolve(None)

    assert outcome.succeeded is False
    assert isinstance(outcome.error, SourceUnavailableError)
    assert store.get() == build_sample_profile()
    assert store.is_established is True


def test_missing_payload_keeps_established_document():
    resolver, store = make_resolver(ProfileDocument.from_dict(MOCK_DOCUMENT_DICT))
    resolver.resolve(None)
    assert store.get().to_dict() == MOCK_DOCUMENT_DICT


def test_missing_payload_keeps_edits_typed_before_any_load():
    resolver, store = make_resolver()
    store.replace_field("full_name", "Grace Hopper")
    store.replace_field("skills", ["COBOL"])

    outcome = resolver.resolve(None)

    assert isinstance(outcome.error, SourceUnavailableError)
    assert store.get().full_name == "Grace Hopper"
    assert store.get().skills == ["COBOL"]
    assert store.has_user_edits is True


def test_first_import_starts_from_sample():
    resolver, store = make_resolver()

    outcome = resolver.resolve(MOCK_IDENTITY_PAYLOAD)

    assert outcome.succeeded is True
    assert sorted(outcome.value) == ["email", "full_name", "title"]
    document = store.get()
    assert document.full_name == "Ada Lovelace"
    assert document.title == "Architect"
    assert len(document.experience) == 1
    assert store.has_user_edits is False


def test_incoming_wins_without_user_edits():
    resolver, store = make_resolver(ProfileDocument.from_dict(MOCK_DOCUMENT_DICT))
    resolver.resolve({"name": "Ada Lovelace", "headline": "Architect"})
    assert store.get().full_name == "Ada Lovelace"
    assert store.get().title == "Architect"


def test_user_edited_scalar_survives_import():
    resolver, store = make_resolver()
    store.replace_field("title", "Senior Dev")

    resolver.resolve({"firstName": "Ada", "headline": "Architect"})

    assert store.get().title == "Senior Dev"
    assert store.get().full_name == "Ada"


def test_blank_incoming_title_keeps_user_value():
    resolver, store = make_resolver()
    store.replace_field("title", "Architect")

    resolver.resolve({"firstName": "Ada", "headline": ""})

    assert store.get().title == "Architect"


def test_empty_incoming_list_keeps_current():
    resolver, store = make_resolver()
    store.replace_field("skills", ["Go"])

    resolver.resolve({"name": "Ada", "skills": []})

    assert store.get().skills == ["Go"]


def test_non_empty_incoming_list_replaces_wholesale_even_after_edits():
    resolver, store = make_resolver()
    store.replace_field("skills", ["Go"])

    resolver.resolve({"name": "Ada", "skills": ["Python", "SQL"]})

    assert store.get().skills == ["Python", "SQL"]


def test_unsupplied_fields_untouched():
    resolver, store = make_resolver(ProfileDocument.from_dict(MOCK_DOCUMENT_DICT))
    resolver.resolve({"email": "new@example.com"})
    document = store.get()
    assert document.email == "new@example.com"
    assert document.phone == "555-0100"
    assert document.summary == "A"


def test_malformed_payload_changes_nothing():
    resolver, store = make_resolver(ProfileDocument.from_dict(MOCK_DOCUMENT_DICT))

    outcome = resolver.resolve({"name": "Ada", "skills": "Go, Python"})

    assert outcome.succeeded is False
    assert isinstance(outcome.error, ShapeMismatchError)
    assert store.get().to_dict() == MOCK_DOCUMENT_DICT


@pytest.mark.parametrize("payload,field_key", [
    ({"name": "Ada", "email": 123}, "email"),
    ({"firstName": ["Ada"]}, "first_name"),
    ({"headline": {"text": "Architect"}}, "title"),
])
def test_wrongly_typed_identity_fields_are_rejected(payload, field_key):
    resolver, store = make_resolver(ProfileDocument.from_dict(MOCK_DOCUMENT_DICT))

    outcome = resolver.resolve(payload)

    assert isinstance(outcome.error, ShapeMismatchError)
    assert outcome.error.field_key == field_key
    assert store.get().to_dict() == MOCK_DOCUMENT_DICT


def test_resolve_notifies_observers_once():
    resolver, store = make_resolver()
    seen = []
    store.subscribe(seen.append)
    resolver.resolve(MOCK_IDENTITY_PAYLOAD)
    assert len(seen) == 1


# -----------------------------
# resolve_sample
# -----------------------------
def test_resolve_sample_on_fresh_store():
    resolver, store = make_resolver()
    outcome = resolver.resolve_sample()
    assert outcome.succeeded is True
    assert store.get() == build_sample_profile()


def test_resolve_sample_keeps_user_edits():
    resolver, store = make_resolver()
    store.replace_field("full_name", "Ada")
    store.replace_field("skills", ["Go"])

    resolver.resolve_sample()

    assert store.get().full_name == "Ada"
    assert store.get().skills == ["Go"]
