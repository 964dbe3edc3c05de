# src/chatrelay/utils/logs.py

import logging
import os
import warnings

NOISY_LOGGERS = ["httpx", "httpcore", "LiteLLM", "litellm", "aiohttp", "pydantic"]


def configure_logging(level: str = "WARNING") -> None:
    """Configure root logging and quiet third-party loggers.

    Third-party loggers never log below WARNING, whatever the root level.
    Warnings are hidden unless CHATRELAY_SHOW_WARNINGS is set.
    """
    if not os.getenv("CHATRELAY_SHOW_WARNINGS"):
        warnings.filterwarnings("ignore")

    numeric_level = getattr(logging, str(level).upper(), logging.WARNING)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(numeric_level)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(max(numeric_level, logging.WARNING))
