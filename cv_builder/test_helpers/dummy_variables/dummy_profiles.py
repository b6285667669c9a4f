"""dummy_profiles.py
Dummy documents, identity payloads and generator envelopes for testing.
"""

MOCK_DOCUMENT_DICT = {
    "full_name": "Jane Doe",
    "title": "Data Engineer",
    "email": "jane.doe@example.com",
    "phone": "555-0100",
    "location": "Berlin",
    "summary": "A",
    "skills": ["Go"],
    "languages": ["English"],
    "education": [{"school": "TU Berlin", "degree": "MSc Computer Science", "years": "2014-2016"}],
    "experience": [
        {"title": "X", "company": "Acme", "years": "2018-2024", "description": "Built pipelines."},
        {"title": "Intern", "company": "Initech", "years": "2017", "description": "Wrote reports."},
    ],
    "projects": [],
}

MOCK_IDENTITY_PAYLOAD = {
    "id": "user-123",
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "picture": "https://example.com/ada.png",
    "headline": "Architect",
}

MOCK_TAILORED_DOCUMENT = {
    **MOCK_DOCUMENT_DICT,
    "title": "Platform Engineer",
    "summary": "Platform engineer building reliable data infrastructure.",
    "skills": ["Go", "Kubernetes"],
}

# ---- Generator envelopes ----
OK_SUMMARY_ENVELOPE = {"status": "ok", "data": "B"}
OK_SKILLS_ENVELOPE = {"status": "ok", "data": {"skills": ["Python", "SQL"]}}
OK_EXPERIENCE_ITEM_ENVELOPE = {"status": "ok", "data": "Led the data platform team."}
RATE_LIMITED_ENVELOPE = {"status": "error", "error": "Rate limit exceeded (429)"}
QUOTA_ENVELOPE = {"status": "error", "error": "AI credits exhausted", "code": "quota_exhausted"}
GENERIC_ERROR_ENVELOPE = {"status": "error", "error": "Model overloaded"}

OK_TAILORING_ENVELOPE = {"success": True, "tailoredDocument": MOCK_TAILORED_DOCUMENT}
FAILED_TAILORING_ENVELOPE = {"success": False, "error": "Tailoring service unavailable"}

OK_GENERATION_ENVELOPE = {"success": True, "summary": "  Generated summary.  "}
FAILED_GENERATION_ENVELOPE = {"success": False, "error": "Too many requests"}

# Dummy LLM outputs used when LLM responses are mocked
MOCK_LLM_DUMMY_RESPONSES = {
    "regenerate_summary": "Mocked summary.",
    "regenerate_skills": {"skills": ["Python", "SQL"]},
    "regenerate_experience": {"description": "Mocked description."},
    "tailor_document": MOCK_TAILORED_DOCUMENT,
    "generate_summary": "Mocked CV summary.",
}
