"""plaintext_renderer.py
Default renderer turning an ExportSnapshot into a plain-text document.
"""
from typing import List

from cv_builder.models import ExportSnapshot


def render_plaintext(snapshot: ExportSnapshot) -> bytes:
    """
    Render the visible sections of `snapshot` as UTF-8 text.

    Header lines (name, title, contact details) are included when filled in;
    every other section only when listed in `snapshot.visible_sections`.
    """
    document = snapshot.document
    lines: List[str] = []

    if document.full_name:
        lines.append(document.full_name)
    if document.title:
        lines.append(document.title)
    contact = [value for value in (document.email, document.phone, document.location) if value]
    if contact:
        lines.append(" | ".join(contact))

    for section in snapshot.visible_sections:
        lines += ["", section.upper()]
        if section == "summary":
            lines.append(document.summary)
        elif section == "experience":
            for item in document.experience:
                lines.append(f"{item.title} - {item.company} ({item.years})")
                if item.description:
                    lines.append(f"  {item.description}")
        elif section == "education":
            for item in document.education:
                lines.append(f"{item.degree}, {item.school} ({item.years})")
        elif section == "projects":
            for item in document.projects:
                lines.append(f"{item.name}: {item.description}")
        else:
            lines.append(", ".join(getattr(document, section)))

    return ("\n".join(lines) + "\n").encode("utf-8")
