"""tailor_profile_cli.py
Tailor a profile document to a job title from the command line.
Example: `python tailor_profile_cli.py path/to/profile.json "Data Engineer"`
"""
import asyncio
import json
import sys

from cv_builder.models import ProfileDocument
from cv_builder.exceptions import CVBuilderError
from cv_builder.profile_classes.generator.llm_profile_generator import LLMProfileGenerator
from cv_builder.profile_classes.session.editing_session import EditingSession


async def tailor_file(file_path: str, job_title: str) -> int:
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    session = EditingSession(generator=LLMProfileGenerator())
    try:
        session.document_store.replace_all(ProfileDocument.from_dict(data))
    except CVBuilderError as e:
        print(f"Invalid profile document: {e}")
        return 1

    outcome = await session.tailor(job_title)
    if not outcome.succeeded:
        print(f"Tailoring failed: {outcome.message} ({outcome.error})")
        return 1

    print(json.dumps(outcome.value.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main():
    if len(sys.argv) < 3:
        print('Usage: python tailor_profile_cli.py <profile.json> "<job title>"')
        sys.exit(1)

    file_path, job_title = sys.argv[1], sys.argv[2]
    sys.exit(asyncio.run(tailor_file(file_path, job_title)))


if __name__ == "__main__":
    main()
