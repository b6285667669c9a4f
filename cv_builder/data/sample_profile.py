"""sample_profile.py
Built-in sample document used when no imported profile is available.
"""
from cv_builder.models import ProfileDocument, Education, Experience


def build_sample_profile() -> ProfileDocument:
    """
    Return a fresh copy of the sample document: blank fields with one empty
    education and one empty experience entry ready to be filled in.
    """
    return ProfileDocument(
        full_name="",
        title="",
        email="",
        phone="",
        location="",
        summary="",
        skills=[],
        education=[Education(school="", degree="", years="")],
        experience=[Experience(title="", company="", years="", description="")],
        projects=[],
        languages=[],
    )
