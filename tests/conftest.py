"""conftest.py
Session logging, the `--llm-mode` option and the mock-LLM fixtures.

LLM test modes:
    pytest                      # mock_only (default): generators never reach the LLM
    pytest --llm-mode=basic_only # plus the few tests that make one live call each
    pytest --llm-mode=full       # USE_MOCK_LLM_RESPONSE_SETTING stops mocking too
"""
import os

import pytest
from cv_builder.logging import LoggerFactory
from cv_builder.conftest_helpers import apply_mock_llm_patch

LLM_TEST_MODES = ["mock_only", "basic_only", "full"]

# --------------------------------------------------------------
# SETUP TEST LOGGING
# --------------------------------------------------------------
logger = LoggerFactory().get_logger(
    name="pytest_logger",
    logger_type="pytest",
    console=True
)
current_module = None

@pytest.hookimpl(tryfirst=True)
def pytest_sessionstart(session):
    logger.info("==== CV BUILDER TEST SESSION START ====")

@pytest.hookimpl(tryfirst=True)
def pytest_runtest_logstart(nodeid, location):
    """Log a header whenever the run moves on to another test module."""
    global current_module
    module = location[0]
    if module != current_module:
        current_module = module
        logger.info(f"\n---- {current_module} ----")

@pytest.hookimpl(tryfirst=True)
def pytest_runtest_logreport(report):
    if report.when != "call":
        return

    if report.passed:
        logger.info(f"PASSED: {report.nodeid} ({report.duration:.2f}s)")
    elif report.failed:
        logger.error(f"FAILED: {report.nodeid}\n{report.longreprtext}")
    elif report.skipped:
        logger.warning(f"SKIPPED: {report.nodeid}\n{report.longreprtext}")

@pytest.hookimpl(tryfirst=True)
def pytest_sessionfinish(session, exitstatus):
    logger.info(f"==== CV BUILDER TEST SESSION END: exitstatus={exitstatus} ====")


# --------------------------------------------------------------
# LLM TEST MODE
# --------------------------------------------------------------
def pytest_addoption(parser):
    parser.addoption(
        "--llm-mode",
        action="store",
        default="mock_only",
        choices=LLM_TEST_MODES,
        help=(
            "How much of the suite may query the live LLM: "
            "'mock_only' (default), 'basic_only' or 'full'."
        ),
    )

@pytest.fixture(scope="session")
def LLM_TEST_MODE(request):
    """The `--llm-mode` of this run: 'mock_only', 'basic_only' or 'full'."""
    return request.config.getoption("--llm-mode")

@pytest.fixture
def LIVE_LLM(LLM_TEST_MODE):
    """
    Gate for tests that make a real LLM call.

    Skips in mock_only mode and when no Anthropic key is configured in `.env`.
    """
    if LLM_TEST_MODE == "mock_only":
        pytest.skip("Live LLM tests disabled (--llm-mode=mock_only)")
    key = os.getenv("ANTHROPIC_API_KEY")
    if not key or key == "<REPLACE_ME>":
        pytest.skip("Anthropic API key not defined in .env")
    return LLM_TEST_MODE


# --------------------------------------------------------------
# MOCK LLM FIXTURES
# --------------------------------------------------------------
@pytest.fixture(autouse=False)
def FORCE_MOCK_LLM_RESPONSES(monkeypatch):
    """
    Make every LLMProfileGenerator built during the test answer with dummy
    responses, whatever the LLM test mode.

    Use per function (`def test_x(FORCE_MOCK_LLM_RESPONSES)`) or per class
    (`@pytest.mark.usefixtures("FORCE_MOCK_LLM_RESPONSES")`).
    """
    apply_mock_llm_patch(monkeypatch)
    yield


@pytest.fixture
def USE_MOCK_LLM_RESPONSE_SETTING(monkeypatch, LLM_TEST_MODE):
    """Like FORCE_MOCK_LLM_RESPONSES, except in `--llm-mode=full` where generators go live."""
    if LLM_TEST_MODE != "full":
        apply_mock_llm_patch(monkeypatch)
    yield
