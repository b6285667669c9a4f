"""conftest_helpers.py
Helper functions for `tests/conftest.py`
"""

from cv_builder.profile_classes.generator.llm_profile_generator import LLMProfileGenerator
from cv_builder.test_helpers.dummy_variables.dummy_profiles import MOCK_LLM_DUMMY_RESPONSES


# --------------------------------------------------------------
# SETUP MONKEYPATCH FIXTURES
# --------------------------------------------------------------
def apply_mock_llm_patch(monkeypatch):
    """
    Core patching logic for LLMProfileGenerator.

    Forces every generator to use mock LLM responses by default:
      - `force_mock_llm_response=True`
      - `llm_dummy_response=MOCK_LLM_DUMMY_RESPONSES` (one entry per operation)

    Notes:
      - Intended to be called from a fixture to control scope.
      - Does not yield; directly applies the monkeypatch.
    """
    original_init = LLMProfileGenerator.__init__

    def patched_init(self, *args, **kwargs):
        kwargs.setdefault("force_mock_llm_response", True)
        kwargs.setdefault("llm_dummy_response", dict(MOCK_LLM_DUMMY_RESPONSES))
        original_init(self, *args, **kwargs)

    monkeypatch.setattr(LLMProfileGenerator, "__init__", patched_init)
