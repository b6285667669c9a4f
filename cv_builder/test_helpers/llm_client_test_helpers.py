"""llm_client_test_helpers.py
Canned LLM responses used by LLMClient in test mode.
"""

from typing import Literal
import json
import random
import uuid

from langchain_core.messages import AIMessage

expected_test_responses = {
    "regenerate_summary": {
        "success": (
            "Results-driven data engineer with six years of experience building reliable "
            "batch and streaming pipelines. Led the migration of a nightly ETL platform to "
            "an event-driven architecture, cutting data latency from hours to minutes."
        ),
        "failed": "",
        "unexpected_json": {"profile": "A data engineer."},
        "not_json": "A data engineer.",
    },
    "regenerate_skills": {
        "success": {"skills": ["Python", "SQL", "Apache Spark", "Airflow"]},
        "failed": {"skills": []},
        "unexpected_json": {"abilities": ["Python"]},
        "not_json": "Python, SQL",
    },
    "regenerate_experience": {
        "success": {
            "description": (
                "Designed and operated streaming pipelines processing 2B events per day; "
                "reduced infrastructure cost by 30% through autoscaling."
            )
        },
        "failed": {"description": ""},
        "unexpected_json": {"responsibilities": "Pipelines."},
        "not_json": "Built pipelines.",
    },
    "tailor_document": {
        "success": {
            "fullName": "Jane Doe",
            "title": "Data Engineer",
            "email": "jane.doe@example.com",
            "phone": "555-0100",
            "location": "Berlin",
            "summary": "Data engineer focused on reliable, observable pipelines.",
            "skills": ["Python", "SQL", "Airflow"],
            "languages": ["English"],
            "education": [{"school": "TU Berlin", "degree": "MSc Computer Science", "years": "2014-2016"}],
            "experience": [
                {
                    "title": "Data Engineer",
                    "company": "Acme",
                    "years": "2018-2024",
                    "description": "Built and ran the company's streaming data platform.",
                }
            ],
            "projects": [],
        },
        "failed": {"error": "Could not tailor document."},
        "unexpected_json": {"resume": "Jane Doe, Data Engineer"},
        "not_json": "Jane Doe, Data Engineer",
    },
    "generate_summary": {
        "success": (
            "Highly motivated data engineer with six years of experience delivering "
            "production pipelines. Brings deep Python and SQL expertise to data-driven teams."
        ),
        "failed": "",
        "unexpected_json": {"summary_text": "A data engineer."},
        "not_json": "A data engineer.",
    },
}

def create_mock_llm_response(
    function_name: Literal[
        "regenerate_summary",
        "regenerate_skills",
        "regenerate_experience",
        "tailor_document",
        "generate_summary",
    ],
    provider: Literal["anthropic"],
    response_type: Literal["success", "failed", "unexpected_json", "not_json"] = "success"
) -> AIMessage:
    """
    Create a simulated AIMessage to mimic LLM responses with realistic structure per provider.
    """
    try:
        content_value = expected_test_responses[function_name][response_type]
    except KeyError:
        content_value = "Generic response"

    # Convert dict responses to JSON string; leave strings as-is
    content = json.dumps(content_value) if isinstance(content_value, dict) else content_value

    # --- token counts ---
    input_tokens = random.randint(50, 150)
    output_tokens = random.randint(20, 100)
    total_tokens = input_tokens + output_tokens

    # --- build response metadata depending on provider ---
    if provider == "anthropic":
        response_metadata = {
            "id": str(uuid.uuid4()),
            "model": "claude-haiku-4-5",
            "stop_reason": "end_turn",
            "usage": {
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "total_tokens": total_tokens
            }
        }
    else:
        raise ValueError(f"Unknown llm provider: {provider}")

    return AIMessage(
        content=content,
        additional_kwargs={},
        response_metadata=response_metadata,
        id=str(uuid.uuid4()),
        usage_metadata={
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": total_tokens
        }
    )
