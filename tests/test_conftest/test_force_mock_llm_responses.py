"""test_force_mock_llm_responses.py
Confirm FORCE_MOCK_LLM_RESPONSES and USE_MOCK_LLM_RESPONSE_SETTING
apply correctly depending on scope and LLM_TEST_MODE.
"""
import asyncio

import pytest

from cv_builder.test_helpers.dummy_variables.dummy_profiles import MOCK_LLM_DUMMY_RESPONSES
from cv_builder.profile_classes.generator.llm_profile_generator import LLMProfileGenerator
from cv_builder.profile_classes.generator.profile_generator import GenerationPayload


# ---------------------------------------------------------------------------
# Confirm default behavior without fixture
# ---------------------------------------------------------------------------
def test_generator_unpatched_by_default():
    """Generators should not be patched unless a fixture is applied."""
    generator = LLMProfileGenerator()
    assert generator.force_mock_llm_response is False
    assert generator.llm_dummy_response == {}


# ---------------------------------------------------------------------------
# Class-level fixture tests
# ---------------------------------------------------------------------------
@pytest.mark.usefixtures("FORCE_MOCK_LLM_RESPONSES")
class TestForceMockClassLevel:
    """Verify FORCE_MOCK_LLM_RESPONSES applies at the class level."""

    def test_generator_patched(self):
        generator = LLMProfileGenerator()
        assert generator.force_mock_llm_response is True, (
            "Class-level patch failed: LLMProfileGenerator did not get force_mock_llm_response=True"
        )
        assert generator.llm_dummy_response == MOCK_LLM_DUMMY_RESPONSES

    def test_explicit_dummy_response_wins(self):
        generator = LLMProfileGenerator(llm_dummy_response={"generate_summary": "Custom."})
        assert generator.llm_dummy_response == {"generate_summary": "Custom."}


# ---------------------------------------------------------------------------
# Function-level fixture test
# ---------------------------------------------------------------------------
def test_function_level_patch_answers_without_llm(FORCE_MOCK_LLM_RESPONSES):
    """A patched generator answers from the dummy responses without building an LLM client."""
    generator = LLMProfileGenerator()
    payload = GenerationPayload(name="Jane", title="Data Engineer", skills="Go", experience_text="")

    response = asyncio.run(generator.generate_cv(payload))

    assert response == {"success": True, "summary": MOCK_LLM_DUMMY_RESPONSES["generate_summary"]}
    assert generator.llm_client is None


# ---------------------------------------------------------------------------
# Conditional patch tests
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("LLM_TEST_MODE,expected", [
    ("mock_only", True),
    ("basic_only", True),
    ("full", False),
])
def test_use_mock_llm_response_setting(LLM_TEST_MODE, expected, USE_MOCK_LLM_RESPONSE_SETTING):
    """USE_MOCK_LLM_RESPONSE_SETTING mocks generators in every mode except "full"."""
    generator = LLMProfileGenerator()
    assert (generator.force_mock_llm_response is True) == expected
    if expected:
        assert generator.llm_dummy_response == MOCK_LLM_DUMMY_RESPONSES
