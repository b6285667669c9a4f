"""exceptions.py
Defines custom exceptions for this project.
"""
from typing import Optional

# ------------------------ Profile Builder Errors ------------------------
class CVBuilderError(Exception):
    """
    Base exception for every recoverable failure of a profile operation.

    Each subclass carries a stable `code` (used by the API layer) and an
    actionable `user_message` telling the user whether to retry, log in or wait.

    Attributes:
        message (str): Developer-facing description of what went wrong.
    """
    code: str = "error"
    user_message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.user_message
        super().__init__(self.message)


class UnauthorizedError(CVBuilderError):
    """Raised when an operation requiring a logged-in session is attempted without one."""
    code = "unauthorized"
    user_message = "Please log in to use AI generation."


class AlreadyInProgressError(CVBuilderError):
    """Raised when a regeneration (or tailoring) is requested for a busy target."""
    code = "already_in_progress"
    user_message = "Already regenerating. Please wait for the current request to finish."

    def __init__(self, field_key: Optional[str] = None, index: Optional[int] = None, message: Optional[str] = None):
        self.field_key = field_key
        self.index = index
        if message is None and field_key:
            target = f"{field_key}[{index}]" if index is not None else field_key
            message = f"A regeneration for `{target}` is already pending."
        super().__init__(message)


class StaleTargetError(CVBuilderError):
    """Raised when a response arrives for a list item that no longer exists."""
    code = "stale_target"
    user_message = "The item changed while it was being regenerated. Please try again."

    def __init__(self, field_key: Optional[str] = None, index: Optional[int] = None, message: Optional[str] = None):
        self.field_key = field_key
        self.index = index
        if message is None and field_key:
            message = f"`{field_key}[{index}]` no longer exists; the response was discarded."
        super().__init__(message)


class SourceUnavailableError(CVBuilderError):
    """Raised when the identity source returns no profile."""
    code = "source_unavailable"
    user_message = "Could not load your profile. Using sample data."


class ShapeMismatchError(CVBuilderError):
    """Raised when a value does not match the declared shape of a profile field."""
    code = "shape_mismatch"
    user_message = "The received content had an unexpected format. Please try again."

    def __init__(self, field_key: Optional[str] = None, message: Optional[str] = None):
        self.field_key = field_key
        if message is None:
            message = f"Value does not match the declared shape of field `{field_key}`."
        super().__init__(message)


class MissingInputError(CVBuilderError):
    """Raised when a required input is blank."""
    code = "missing_input"
    user_message = "Please enter your professional title first."

    def __init__(self, input_name: str, message: Optional[str] = None):
        self.input_name = input_name
        super().__init__(message or f"Required input `{input_name}` is blank.")


class GenerationTimeoutError(CVBuilderError):
    """Raised when a remote call does not answer within the configured bound."""
    code = "timeout"
    user_message = "The request took too long. Please try again."

    def __init__(self, operation: str, timeout_seconds: float):
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(f"`{operation}` got no response within {timeout_seconds} seconds.")


class RemoteFailureError(CVBuilderError):
    """Raised when the remote service answers with an explicit error."""
    code = "remote_failure"
    user_message = "The generation service is unavailable right now. Please try again later."


class RateLimitedError(RemoteFailureError):
    """Remote failure caused by a rate limit."""
    code = "rate_limited"
    user_message = "Rate limit exceeded. Please wait a moment and try again."


class QuotaExhaustedError(RemoteFailureError):
    """Remote failure caused by exhausted credits or quota."""
    code = "quota_exhausted"
    user_message = "AI credits exhausted. Please wait until credits are added and try again."


class NetworkFailureError(CVBuilderError):
    """Raised on transport-level failures reaching a remote service."""
    code = "network_failure"
    user_message = "Failed to connect to the server. Please check your connection and retry."


class ExportNotReadyError(CVBuilderError):
    """Raised when an export is requested before anything was generated."""
    code = "export_not_ready"
    user_message = "Your CV has not been generated yet. Generate it first."


class ExportRetrievalError(CVBuilderError):
    """Raised when a generated export cannot be retrieved."""
    code = "export_retrieval_failed"
    user_message = "Failed to download CV. Please try again."


# ------------------------ LLM Querying Errors ------------------------
class LLMConfigError(Exception):
    """Raised when a required configuration (in .env by default) for LLMCLient to function
    is missing or invalid."""

    def __init__(
        self,
        variable_name: str,
        message: str = None,
        extra_info: str = None
    ):
        """
        Args:
            variable_name: Name of the config variable.
            message: Optional custom message for the error.
            extra_info: Additional information to append to the error message.
        """
        if message is None:
            message = f"Missing or invalid configuration: {variable_name}. Please set it in your .env file."
        if extra_info:
            message += f" | {extra_info}"
        super().__init__(message)
        self.variable_name = variable_name
        self.extra_info = extra_info

    def __str__(self):
        return f"[CONFIG ERROR] {super().__str__()} | Variable: {self.variable_name}"


class LLMError(Exception):
    """Base exception for all LLM-related errors."""
    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        self.provider = provider
        self.model = model
        self.original_exception = original_exception

        base_msg = message
        if provider:
            base_msg += f" | Provider: {provider}"
        if model:
            base_msg += f" | Model: {model}"
        if original_exception:
            base_msg += f" | Original Exception: {original_exception}"

        super().__init__(base_msg)


class LLMInitializationError(LLMError):
    """Raised when the LLM client fails to initialize."""
    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        original_exception: Optional[Exception] = None,
        additional_message: Optional[str] = None
    ):
        message = "Failed to initialize LLM client"
        if additional_message:
            message += f": {additional_message}"
        super().__init__(
            message=message,
            provider=provider,
            model=model,
            original_exception=original_exception,
        )


class LLMQueryError(LLMError):
    """Raised when a query to the LLM fails."""
    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        additional_message: Optional[str] = None,
        original_exception: Exception = None,
    ):
        message = "LLM query failed"
        if additional_message:
            message += f": {additional_message}"

        super().__init__(
            message=message,
            provider=provider,
            model=model,
            original_exception=original_exception,
        )


class LLMEmptyResponse(LLMError):
    """Raised when the LLM returns an empty response."""
    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None
    ):
        super().__init__(
            message="LLM returned an empty response",
            provider=provider,
            model=model,
        )

