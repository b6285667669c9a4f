"""llm_helpers.py
Functions to help with initiating a LLMClient class
"""

from typing import Optional

from cv_builder.profile_classes.generator.llm.llm_client import LLMClient

def initialize_llm_if_needed(
    llm_client: Optional[LLMClient] = None,
    force_mock_llm_response: bool = False,
) -> Optional[LLMClient]:
    """
    Return a ready-to-use LLMClient, creating one only when it is needed.

    Logic flow:
        1. If an existing `llm_client` is provided validates that it is an instance of
           `LLMClient`, initializes it if that has not happened yet, and returns it.
        2. If responses are mocked no client is needed and `None` is returned.
        3. Otherwise a new LLMClient is created from BUILDER_DEFAULTS and initialized.

    Args:
        llm_client (Optional[LLMClient]): Existing LLM client instance to use or validate.
        force_mock_llm_response (bool): Whether the caller returns dummy responses instead
            of querying the LLM.

    Returns:
        Optional[LLMClient]: An initialized LLMClient, or None if not required.

    Raises:
        TypeError: If `llm_client` is provided but not an instance of `LLMClient`.
        LLMConfigError: If a new client is needed but its configuration is missing.
    """
    if llm_client is not None:
        if not isinstance(llm_client, LLMClient):
            raise TypeError("Provided llm_client must be an instance of LLMClient.")
        if llm_client.client is None:
            llm_client.initialize_client()
        return llm_client

    if force_mock_llm_response:
        return None

    llm_client = LLMClient()
    llm_client.initialize_client()

    return llm_client
