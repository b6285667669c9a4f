"""prompts.py
Prompt templates for the LLM profile generator.
"""
import json
from typing import Any, Tuple

from cv_builder.profile_classes.generator.profile_generator import (
    RegenerationContext,
    TailoringContext,
    GenerationPayload,
)

CV_WRITER_SYSTEM_PROMPT = (
    "You are an expert CV/Resume writer who creates professional, impactful content. "
    "Never invent employers, degrees or dates that are not in the input."
)

SUMMARY_PROMPT = """Write a professional summary (Professional Profile) for a CV.

### Input Data
* Name: {name}
* Target Job Title: {title}
* Key Skills: {skills}
* Relevant Experience: {experience}
* Current Summary: {current}
* Desired Tone/Style: {style}

### Instructions
1. Length: 3 to 5 sentences.
2. Tailor it to the Target Job Title.
3. Open with the role and a quantified experience level, highlight one or two
   achievements from the experience, close with the most relevant skills and
   the value the person brings.
4. Return the summary text only, without headings or introductory text."""

SKILLS_PROMPT = """Improve the skills list of a CV for the job title "{title}".

Current skills: {skills}
Experience: {experience}

Keep skills supported by the input, order them by relevance to the job title,
and add at most three closely related skills.
Return ONLY a JSON object of the form {{"skills": ["skill1", "skill2", ...]}}."""

EXPERIENCE_ITEM_PROMPT = """Rewrite the description of one work experience entry of a CV.
The person targets the job title "{title}".

Entry:
{item}

Write 2 to 4 concise, results-oriented sentences. Keep facts from the entry.
Return ONLY a JSON object of the form {{"description": "..."}}."""

EXPERIENCE_LIST_PROMPT = """Rewrite the descriptions of all work experience entries of a CV.
The person targets the job title "{title}".

Entries:
{items}

Keep title, company and years unchanged. Return ONLY a JSON array of objects
with the keys "title", "company", "years" and "description", in the same order."""

TAILOR_PROMPT = """Tailor the following CV to the job title "{job_title}".

CV (JSON):
{document}

Rewrite the summary, reorder and refine skills, and sharpen experience and
project descriptions for the target role. Keep names, contact details,
employers, schools and dates unchanged.
Return ONLY the complete CV as a JSON object with exactly the same keys."""


def _format_experience(experience: Any) -> str:
    if not experience:
        return "None provided"
    entries = []
    for item in experience:
        entries.append(
            f"{item.get('title', '')} at {item.get('company', '')} "
            f"({item.get('years', '')}): {item.get('description', '')}"
        )
    return "; ".join(entries)


def build_regeneration_prompt(context: RegenerationContext, style: str) -> Tuple[str, bool]:
    """
    Build the user prompt for a field regeneration.

    Returns:
        Tuple[str, bool]: The prompt and whether a JSON answer is expected.
    """
    title = context.context.get("title") or "not specified"
    skills = context.context.get("skills") or []
    experience = context.context.get("experience") or []

    if context.field_key == "summary":
        return SUMMARY_PROMPT.format(
            name=context.context.get("full_name") or "not specified",
            title=title,
            skills=", ".join(skills) or "None provided",
            experience=_format_experience(experience),
            current=context.target or "None",
            style=style,
        ), False

    if context.field_key == "skills":
        return SKILLS_PROMPT.format(
            title=title,
            skills=", ".join(context.target or []) or "None provided",
            experience=_format_experience(experience),
        ), True

    if context.index is not None:
        return EXPERIENCE_ITEM_PROMPT.format(
            title=title,
            item=json.dumps(context.target, indent=2),
        ), True

    return EXPERIENCE_LIST_PROMPT.format(
        title=title,
        items=json.dumps(context.target, indent=2),
    ), True


def build_tailoring_prompt(context: TailoringContext) -> str:
    document = context.document.to_dict()
    document["fullName"] = document.pop("full_name")
    return TAILOR_PROMPT.format(
        job_title=context.job_title,
        document=json.dumps(document, indent=2),
    )


def build_summary_prompt(payload: GenerationPayload) -> str:
    return SUMMARY_PROMPT.format(
        name=payload.name or "not specified",
        title=payload.title or "not specified",
        skills=payload.skills or "None provided",
        experience=payload.experience_text or "None provided",
        current="None",
        style=payload.style,
    )
