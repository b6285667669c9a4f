"""identity_conversion.py
Convert identity-source payloads into the profile fields they actually supply.
"""
from typing import Any, Dict, Mapping, Union

from cv_builder.models import IdentityProfile, ProfileDocument, is_blank


def identity_to_partial(profile: Union[IdentityProfile, Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Map an identity profile onto ProfileDocument field names.

    Only fields the source really supplies are returned: blank strings and
    missing values are left out so they can never displace existing content.
    Identity sources never expose a phone number, so `phone` is never returned.

    Args:
        profile (IdentityProfile | Mapping[str, Any]): The imported payload.

    Returns:
        Dict[str, Any]: Partial field values keyed by ProfileDocument attribute.
    """
    if not isinstance(profile, IdentityProfile):
        profile = IdentityProfile.from_dict(profile)

    partial: Dict[str, Any] = {}

    full_name = profile.name or f"{profile.first_name or ''} {profile.last_name or ''}".strip()
    if not is_blank(full_name):
        partial["full_name"] = full_name.strip()

    for key in ("email", "title", "location", "summary"):
        value = getattr(profile, key)
        if not is_blank(value):
            partial[key] = value.strip()

    # Lists are passed through even when empty; precedence decides what to do with them
    for key in ("skills", "education", "experience"):
        value = getattr(profile, key)
        if value is not None:
            partial[key] = value

    return partial


def document_to_partial(document: ProfileDocument) -> Dict[str, Any]:
    """Treat a whole document (e.g. the built-in sample) as a source payload."""
    return document.to_dict()
