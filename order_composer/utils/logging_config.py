"""
Logging setup shared by the composer modules and the CLI.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = 'order_composer'

CONSOLE_FORMAT = '%(message)s'
VERBOSE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logging(log_file: Optional[str] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        log_file: Optional path of a log file written in addition to the console
        verbose: Enable DEBUG level output on the console

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Re-running setup must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter(VERBOSE_FORMAT if verbose else CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    """Get the package root logger."""
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_module_logger(module_name: str) -> logging.Logger:
    """Get a logger for a module, nested under the package logger."""
    if module_name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")


def get_composer_logger() -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.composer")


def get_layout_logger() -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.layout")


def get_pdf_logger() -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.pdf")
