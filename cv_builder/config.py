"""config.py
Holds various defaults for different cv builder settings.
"""

from dataclasses import dataclass, field

# --------------------------------------------------------------
# SETUP DEFAULT VALUES
# --------------------------------------------------------------
@dataclass
class BuilderDefaults:
    """
    Default settings for parameters used across the cv_builder repo.
    """
    # ---- FieldRegenerationCoordinator settings ----
    REGENERATION_TIMEOUT_SECONDS: float = field(
        default = 30.0,
        metadata = {
            "description": "Seconds to wait for a field regeneration before giving up"
    })

    # ---- TailoringEngine settings ----
    TAILORING_TIMEOUT_SECONDS: float = field(
        default = 60.0,
        metadata = {
            "description": "Seconds to wait for a full-document tailoring before giving up"
    })

    # ---- SourceResolver / identity fetch settings ----
    SOURCE_FETCH_TIMEOUT_SECONDS: float = field(
        default = 10.0,
        metadata = {
            "description": "Seconds to wait for the imported identity profile"
    })

    # ---- CVGenerationService settings ----
    CV_GENERATION_TIMEOUT_SECONDS: float = field(
        default = 60.0,
        metadata = {
            "description": "Seconds to wait for full CV generation"
    })
    CV_GENERATION_VARIANT: str = field(
        default = "summary",
        metadata = {
            "description": (
                'What CV generation produces: "summary" (inline summary applied to the document) '
                'or "artifact" (rendered, downloadable document)'
            )
    })
    SUMMARY_STYLE: str = field(
        default = "minimal",
        metadata = {
            "description": "Desired tone/style passed to the generator for summaries"
    })

    # ---- SessionManager settings ----
    SESSION_IDLE_TTL_SECONDS: float = field(
        default = 3600.0,
        metadata = {
            "description": "Seconds a session may stay idle before it and its exports are dropped"
    })

    # ---- LLMClient settings ----
    LLM_PROVIDER: str = field(
        default = "anthropic",
        metadata = {
            "description": 'LLM provider: "anthropic"'
    })
    ANTHROPIC_MODEL_ID: str = field(
        default = "claude-haiku-4-5",
        metadata = {
            "description": "Anthropic model ID"
    })
    LLM_TEMPERATURE: float = field(
        default = 0.5,
        metadata = {
            "description": "Sampling temperature used for generation queries"
    })


# Import this where needed
BUILDER_DEFAULTS = BuilderDefaults()
