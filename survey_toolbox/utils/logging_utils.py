"""
Logging Utilities Module
-----------------------
Provides helpers for setting up and managing logging.
"""
import logging
import os
from typing import Callable, Optional, Tuple

from tqdm import tqdm

LOGGER_NAME = 'SurveyToolbox'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_level: Optional[str] = None) -> logging.Logger:
    """
    Sets up and returns the toolbox logger with the specified log level.
    Falls back to SURVEY_TOOLBOX_LOG_LEVEL, then INFO.
    """
    level_name = log_level or os.environ.get('SURVEY_TOOLBOX_LOG_LEVEL', 'INFO')
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.info("LoggingUtils: Logger setup complete.")
    return logger


def log_progress_bar(logger: logging.Logger, total_steps: int, desc: str = "Surveys") -> Tuple[Callable[..., None], Callable[[], None]]:
    """
    Logs a progress bar using tqdm, writing progress to the logger.
    Returns (update, close) functions.
    """
    bar = tqdm(total=total_steps, desc=desc, ncols=70, bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]', leave=False)

    def update(step: int = 1) -> None:
        bar.update(step)
        logger.info(bar.format_meter(**bar.format_dict))

    def close() -> None:
        bar.close()
    return update, close
