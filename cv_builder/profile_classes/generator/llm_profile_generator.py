"""llm_profile_generator.py
ProfileGenerator backed by an LLM (via LLMClient / LangChain).
"""
from typing import Any, Dict, Optional

from cv_builder.config import BUILDER_DEFAULTS
from cv_builder.exceptions import LLMConfigError, LLMError, NetworkFailureError, RemoteFailureError
from cv_builder.profile_classes.generator.llm.llm_client import LLMClient
from cv_builder.profile_classes.generator.llm.llm_helpers import initialize_llm_if_needed
from cv_builder.profile_classes.generator.profile_generator import (
    ProfileGenerator,
    RegenerationContext,
    TailoringContext,
    GenerationPayload,
)
from cv_builder.profile_classes.generator.prompts import (
    CV_WRITER_SYSTEM_PROMPT,
    build_regeneration_prompt,
    build_tailoring_prompt,
    build_summary_prompt,
)
from cv_builder.profile_classes.patches.generator_responses import remote_failure_from

# Lower-cased fragments identifying transport failures in provider exceptions
NETWORK_ERROR_MARKERS = [
    "apiconnectionerror",
    "connection error",
    "connecterror",
    "connection refused",
    "connection reset",
    "name or service not known",
    "temporary failure in name resolution",
]


def describe_llm_failure(error: Exception) -> str:
    """Flatten an LLM error and its wrapped exception into one lower-cased string."""
    parts = [type(error).__name__, str(error)]
    original = getattr(error, "original_exception", None)
    while original is not None:
        parts += [type(original).__name__, str(original)]
        original = getattr(original, "original_exception", None)
    return " ".join(parts).lower()


class LLMProfileGenerator(ProfileGenerator):
    """
    Generates profile content with a large language model.

    LLM failures are turned into error envelopes carrying a `code` so the
    caller can tell rate limits and exhausted quota from generic failures.
    Connection failures are raised as NetworkFailureError.

    Attributes:
        llm_client (Optional[LLMClient]): Client to query. Created from
            BUILDER_DEFAULTS on first use when not given.
        style (str): Tone/style requested for generated summaries.
        force_mock_llm_response (bool): Return `llm_dummy_response` instead of
            querying the LLM (for testing).
        llm_dummy_response (Optional[Dict[str, Any]]): Dummy responses keyed by
            operation name ("regenerate_summary", "regenerate_skills",
            "regenerate_experience", "tailor_document", "generate_summary").
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        style: str = BUILDER_DEFAULTS.SUMMARY_STYLE,
        force_mock_llm_response: Optional[bool] = False,
        llm_dummy_response: Optional[Dict[str, Any]] = None,
    ):
        self.llm_client = llm_client
        self.style = style
        self.force_mock_llm_response = force_mock_llm_response
        self.llm_dummy_response = llm_dummy_response or {}

        if self.force_mock_llm_response and not self.llm_dummy_response:
            raise ValueError("`llm_dummy_response` is required when `force_mock_llm_response` is True.")

    # ----------------------
    # GENERATOR OPERATIONS
    # ----------------------
    async def regenerate_field(self, context: RegenerationContext) -> Dict[str, Any]:
        prompt, expect_json = build_regeneration_prompt(context, style=self.style)
        try:
            data = await self._query(f"regenerate_{context.field_key}", prompt, expect_json)
        except (LLMError, LLMConfigError) as e:
            return self._error_envelope(e, style="status")
        return {"status": "ok", "data": data}

    async def tailor_document(self, context: TailoringContext) -> Dict[str, Any]:
        prompt = build_tailoring_prompt(context)
        try:
            document = await self._query("tailor_document", prompt, expect_json=True)
        except (LLMError, LLMConfigError) as e:
            return self._error_envelope(e, style="success")
        if not isinstance(document, dict):
            return {"success": False, "error": "Generator did not return a document."}
        return {"success": True, "tailoredDocument": document}

    async def generate_cv(self, payload: GenerationPayload) -> Dict[str, Any]:
        prompt = build_summary_prompt(payload)
        try:
            summary = await self._query("generate_summary", prompt, expect_json=False)
        except (LLMError, LLMConfigError) as e:
            return self._error_envelope(e, style="success")
        return {"success": True, "summary": summary}

    # ----------------------
    # HELPERS
    # ----------------------
    async def _query(self, function_name: str, prompt: str, expect_json: bool) -> Any:
        """Query the LLM, or return the dummy response for `function_name`."""
        if self.force_mock_llm_response:
            if function_name not in self.llm_dummy_response:
                raise LLMError(message=f"No dummy response defined for `{function_name}`")
            return self.llm_dummy_response[function_name]

        self.llm_client = initialize_llm_if_needed(llm_client=self.llm_client)
        self.llm_client.function_name = function_name
        return await self.llm_client.aquery(
            system_prompt=CV_WRITER_SYSTEM_PROMPT,
            user_prompt=prompt,
            expect_json=expect_json,
        )

    def _error_envelope(self, error: Exception, style: str) -> Dict[str, Any]:
        """
        Build the error envelope for an LLM failure.

        Raises:
            NetworkFailureError: If the failure happened at the transport level.
        """
        details = describe_llm_failure(error)
        if any(marker in details for marker in NETWORK_ERROR_MARKERS):
            raise NetworkFailureError(str(error))

        failure = remote_failure_from(details)
        message = str(error) if type(failure) is RemoteFailureError else failure.user_message
        if style == "status":
            return {"status": "error", "error": message, "code": failure.code}
        return {"success": False, "error": message, "code": failure.code}
