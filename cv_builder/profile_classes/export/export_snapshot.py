"""export_snapshot.py
Read-only view of the document for the rendering/export collaborator.
"""
from typing import Optional, Tuple

from cv_builder.models import ExportSnapshot, ProfileDocument, is_blank
from cv_builder.profile_classes.document_store.document_store import DocumentStore

# Display order of the optional sections
SECTION_ORDER: Tuple[str, ...] = ("summary", "experience", "education", "skills", "projects", "languages")


def visible_sections(document: ProfileDocument) -> Tuple[str, ...]:
    """
    Sections with content: list sections when non-empty, the summary when not blank.
    """
    return tuple(section for section in SECTION_ORDER if not is_blank(getattr(document, section)))


class ExportSnapshotProvider:
    """
    Hands out stable snapshots of the current document. Visibility is computed
    every time a snapshot is taken, never cached.
    """

    def __init__(self, document_store: DocumentStore):
        self.document_store = document_store

    def snapshot(self, document: Optional[ProfileDocument] = None) -> ExportSnapshot:
        """
        Args:
            document (Optional[ProfileDocument]): Document to snapshot instead of
                the store's current one (e.g. a preview with generated content).
        """
        document = (document or self.document_store.get()).copy()
        return ExportSnapshot(document=document, visible_sections=visible_sections(document))
