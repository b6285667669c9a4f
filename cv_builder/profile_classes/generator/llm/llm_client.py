"""
llm_client.py

LangChain-based client used by the profile generator.
Supports Anthropic (Claude) with synchronous and asynchronous queries,
configuration validation and optional JSON parsing.
"""
import json
import os
import re
from typing import Optional, Any, List, Literal
import warnings

from dotenv import load_dotenv

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from cv_builder.config import BUILDER_DEFAULTS
from cv_builder.exceptions import (
    LLMConfigError,
    LLMInitializationError,
    LLMQueryError,
    LLMEmptyResponse
)
from cv_builder.test_helpers.llm_client_test_helpers import (
    create_mock_llm_response
)

SUPPORTED_PROVIDERS = ["anthropic"]
load_dotenv()

class LLMClient:
    """
    LangChain chat model wrapper used by LLMProfileGenerator.

    Configuration (provider, model, API key from `.env`) is resolved on
    construction; the LangChain client itself is only built by
    `initialize_client()`, so constructing an LLMClient never costs a call.
    `function_name` names the generator operation being served ("regenerate_summary",
    "tailor_document", ...) and picks the canned answer when `test_mode` is on.
    In test mode no API key is needed.

    Attributes:
        provider (str): LLM provider, one of SUPPORTED_PROVIDERS.
        model (str): Model id; BUILDER_DEFAULTS supplies the provider default.
        api_key (Optional[str]): Provider API key (None in test mode).
        function_name (Optional[str]): Generator operation being served.
        fallback_message (Optional[str]): Returned instead of an empty answer.
        test_mode (bool): Answer with canned AIMessages instead of calling the provider.
        test_response_type (str): Which canned answer to use in test mode.
        client (Any): LangChain chat model, set by `initialize_client()`.

    Example:
        >>> client = LLMClient(provider="anthropic", function_name="generate_summary")
        >>> client.initialize_client()
        >>> summary = await client.aquery(
        ...     system_prompt=CV_WRITER_SYSTEM_PROMPT,
        ...     user_prompt="Write a summary for a Data Engineer.",
        ... )
    """

    def __init__(
        self,
        provider: Optional[str] = BUILDER_DEFAULTS.LLM_PROVIDER,
        model: Optional[str] = None,
        function_name: Optional[str] = None,
        fallback_message: Optional[str] = None,
        test_mode: Optional[bool] = False,
        test_response_type: Literal["success", "failed", "unexpected_json", "not_json"] = "success",
    ):
        """
        Raises:
            LLMConfigError: On an unsupported provider, a missing model id, or a
                missing API key outside test mode.
        """
        self.function_name = function_name
        self.fallback_message = fallback_message
        self.test_mode = test_mode
        self.test_response_type = test_response_type

        # --- Resolve configuration ---
        self.provider = provider
        self._resolve_provider()
        self._resolve_model(model)
        self.api_key = None
        if not self.test_mode:
            self._resolve_api_key()

        # Only fill client when `initialize_client()` is run
        self.client = None

    # --- Init helpers ---
    def _resolve_provider(self) -> None:
        """
        Raises:
            LLMConfigError: If the provider is not one of the supported providers.
        """
        if self.provider not in SUPPORTED_PROVIDERS:
            raise LLMConfigError(
                variable_name="LLM_PROVIDER",
                extra_info=f"Choices are: {SUPPORTED_PROVIDERS}"
            )

    def _resolve_model(self, model: Optional[str]) -> None:
        """
        Use `model` if provided, otherwise the provider default from `BUILDER_DEFAULTS`.

        Raises:
            LLMConfigError: If no model ID is provided or available for the selected provider.
        """
        default_models = {
            "anthropic": BUILDER_DEFAULTS.ANTHROPIC_MODEL_ID,
        }

        resolved_model = model or default_models.get(self.provider)
        if not resolved_model:
            raise LLMConfigError(
                variable_name=f"{self.provider}_MODEL_ID",
                message=(
                    f"You must provide a model ID for `{self.provider}` either via BUILDER_DEFAULTS "
                    "or by explicitly passing `model` when initializing LLMClient."
                )
            )

        self.model = resolved_model

    def _resolve_api_key(self) -> None:
        """
        Load the API key for the selected provider from environment variables.
        Does not check if the key is valid.

        Raises:
            LLMConfigError: If the API key is missing.
        """
        api_key_map = {
            "anthropic": "ANTHROPIC_API_KEY",
        }

        key_name = api_key_map.get(self.provider)
        api_key = os.getenv(key_name) if key_name else None
        if not api_key or api_key == "<REPLACE_ME>":
            raise LLMConfigError(
                variable_name=f"{self.provider}_API_KEY",
                message=(
                    f"You must set a `{self.provider}` API key in your environment variables "
                    "to run generation queries against their services."
                )
            )

        self.api_key = api_key

    def initialize_client(self) -> None:
        """
        Initialize the LangChain chat model client for the selected provider.
        No API call is made, so this does not incur costs.

        Raises:
            LLMInitializationError: If the client cannot be initialized.
        """
        if self.test_mode:
            # Canned responses never reach the client
            self.client = object()
            return
        try:
            if self.provider == "anthropic":
                from langchain_anthropic import ChatAnthropic
                self.client = ChatAnthropic(
                    model=self.model,
                    anthropic_api_key=self.api_key,
                    temperature=BUILDER_DEFAULTS.LLM_TEMPERATURE
                )
        except Exception as e:
            raise LLMInitializationError(
                provider=self.provider,
                model=self.model,
                original_exception=e
            )

    # --- QUERY EXECUTION ---
    def query(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: float = BUILDER_DEFAULTS.LLM_TEMPERATURE,
        expect_json: bool = False,
    ) -> str | dict | list:
        """
        Blocking model query. See `aquery` for arguments and return value.
        """
        messages = self._build_messages(system_prompt, user_prompt)
        try:
            response = self._mock_response() if self.test_mode else self.client.invoke(
                messages,
                temperature=temperature
            )
            return self._read_response(response, expect_json)
        except Exception as e:
            raise LLMQueryError(provider=self.provider, model=self.model, original_exception=e)

    async def aquery(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: float = BUILDER_DEFAULTS.LLM_TEMPERATURE,
        expect_json: bool = False,
    ) -> str | dict | list:
        """
        Perform a model query without blocking the event loop.

        Args:
            system_prompt (Optional[str]): Instruction or behavioral setup for the model.
            user_prompt (str): Input text or main query.
            temperature (float): Model creativity level (0.0–1.0).
            expect_json (bool): Whether to parse response as JSON.

        Returns:
            str | dict | list: Parsed JSON if `expect_json` is True otherwise str. A str
                may be returned even when `expect_json` is True if the LLM misbehaves.

        Raises:
            LLMInitializationError: If `initialize_client()` was not run.
            LLMQueryError: Wrapping any failure of the underlying call.
        """
        messages = self._build_messages(system_prompt, user_prompt)
        try:
            if self.test_mode:
                response = self._mock_response()
            else:
                response = await self.client.ainvoke(messages, temperature=temperature)
            return self._read_response(response, expect_json)
        except Exception as e:
            raise LLMQueryError(provider=self.provider, model=self.model, original_exception=e)

    def _build_messages(self, system_prompt: Optional[str], user_prompt: str) -> List[BaseMessage]:
        if not self.client:
            raise LLMInitializationError(provider=self.provider, model=self.model)
        messages = [
            SystemMessage(content=system_prompt) if system_prompt else None,
            HumanMessage(content=user_prompt)
        ]
        return [m for m in messages if m]  # Remove None

    def _mock_response(self) -> AIMessage:
        if not self.function_name:
            raise LLMQueryError(
                provider=self.provider,
                model=self.model,
                additional_message=(
                    "Test mode is enabled without a `function_name` to pick a canned response for."
                ),
            )
        return create_mock_llm_response(
            function_name=self.function_name,
            response_type=self.test_response_type,
            provider=self.provider
        )

    def _read_response(self, response: Optional[AIMessage], expect_json: bool) -> Any:
        """Validate, strip and optionally JSON-decode a model response."""
        if not response or not response.content:
            raise LLMEmptyResponse(provider=self.provider, model=self.model)

        response_content = response.content.strip()

        if expect_json:
            try:
                response_content = self._clean_llm_json_response(response_text=response_content)
            except Exception as e:
                warnings.warn(
                    (
                        f"LLM did not return valid JSON when it was expected to. "
                        f"Provider: `{self.provider}` "
                        f"Model: `{self.model}` "
                        f"Function: `{self.function_name}` \n"
                        f"Exception: `{e}`"
                    ),
                    category=UserWarning,
                )

        if not response_content:
            response_content = self.fallback_message or "No query result"

        return response_content

    def _clean_llm_json_response(self, response_text: str):
        """
        Parse a JSON string returned by an LLM, tolerating Markdown code fences
        and stray text around the JSON object or array.

        Raises:
            json.JSONDecodeError: If no valid JSON structure can be extracted.
        """
        text = response_text.strip()

        # Remove code fences like ```json ... ```
        text = re.sub(r"^```[a-zA-Z]*\n?", "", text)
        text = re.sub(r"\n?```$", "", text)

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Fall back to the first {...} or [...] block
            match = re.search(r"(\{.*\}|\[.*\])", text, re.DOTALL)
            if match:
                return json.loads(match.group(1))
            raise
