"""logging.py
Holds configured loggers for the CV builder components.
"""
from typing import Any, Literal, MutableMapping, Optional, Tuple
import logging
import os
import sys
from datetime import datetime
from dotenv import load_dotenv

load_dotenv()  # load .env

ENV = os.getenv("ENV", "development")  # e.g., development, staging, production
LOG_LEVEL = os.getenv("CV_BUILDER_LOG_LEVEL")  # overrides the per-type default when set

LoggerType = Literal["default", "pytest", "source", "regeneration", "tailoring", "export"]

# Sub folder of `logs/` used in development per logger type
LOG_SUBFOLDERS = {
    "default": "",
    "pytest": "tests",
    "source": "source_resolution",
    "regeneration": "regeneration",
    "tailoring": "tailoring",
    "export": "export",
}

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class SessionLogAdapter(logging.LoggerAdapter):
    """Prefixes every record with the editing session it belongs to."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[session {self.extra['session_id']}] {msg}", kwargs


class LoggerFactory:
    """
    Factory to create configured loggers for the profile components.

    Logging behavior depends on environment (ENV):
      - Console logging is optional.
      - development/local/test write one file per logger under `logs/<type>/`.
      - staging/production ship records to CloudWatch when watchtower is installed.
    Loggers are configured once; asking for the same name again returns it unchanged.
    """

    def __init__(self, env: str = ENV, base_log_folder: str = "logs"):
        self.env = env
        self.base_log_folder = base_log_folder

    def get_logger(
        self,
        name: str,
        logger_type: LoggerType = "default",
        console: bool = True
    ) -> logging.Logger:
        logger = logging.getLogger(name)
        # Only this logger's own handlers; hasHandlers() also sees the root logger's
        if logger.handlers:
            return logger

        logger.propagate = False
        logger.setLevel(self._level_for_type(logger_type))
        formatter = logging.Formatter(LOG_FORMAT)

        if console:
            self._add_handler(logger, logging.StreamHandler(), formatter)

        if self.env in ["development", "local", "test"]:
            log_folder = self._get_log_folder_for_type(logger_type)
            os.makedirs(log_folder, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file_path = os.path.join(log_folder, f"{name}_{timestamp}.log")
            self._add_handler(logger, logging.FileHandler(log_file_path, mode="a", encoding="utf-8"), formatter)
        elif self.env in ["staging", "production"]:
            self._add_cloudwatch_handler(logger, logger_type, formatter)

        # Never leave a logger silent
        if not logger.handlers:
            self._add_handler(logger, logging.StreamHandler(), formatter)

        return logger

    def get_session_logger(self, logger: logging.Logger, session_id: Optional[str]) -> SessionLogAdapter:
        """Wrap `logger` so its records name the session (`anonymous` when there is no id yet)."""
        return SessionLogAdapter(logger, {"session_id": session_id or "anonymous"})

    # ----------------------
    # HELPERS
    # ----------------------
    @staticmethod
    def _level_for_type(logger_type: LoggerType) -> int:
        if LOG_LEVEL:
            return logging.getLevelName(LOG_LEVEL.upper())
        # Component loggers only record INFO and above
        return logging.DEBUG if logger_type in ["default", "pytest"] else logging.INFO

    @staticmethod
    def _add_handler(logger: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    def _get_log_folder_for_type(self, logger_type: LoggerType) -> str:
        # Everything written during a pytest run lands under logs/tests
        if any("pytest" in arg for arg in sys.argv):
            return os.path.join(self.base_log_folder, LOG_SUBFOLDERS["pytest"])
        return os.path.join(self.base_log_folder, LOG_SUBFOLDERS.get(logger_type, ""))

    def _add_cloudwatch_handler(
        self,
        logger: logging.Logger,
        logger_type: LoggerType,
        formatter: logging.Formatter,
    ):
        """CloudWatch log group per logger type, e.g. `cv_builder_regeneration_logs`."""
        try:
            import watchtower
        except ImportError:
            logger.warning("watchtower not installed, skipping cloud logging.")
            return

        log_group = "cv_builder_logs" if logger_type == "default" else f"cv_builder_{logger_type}_logs"
        self._add_handler(logger, watchtower.CloudWatchLogHandler(log_group=log_group), formatter)
