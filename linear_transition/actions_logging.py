#!/usr/bin/env python3
"""
Logging setup for the Linear transition action.

Inside GitHub Actions, debug, warning and error records are rendered as
workflow commands so they show up as annotations on the run.
"""

import logging
import os
from typing import List, Mapping, Optional

DEFAULT_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def escape_data(message: str) -> str:
    """Escape a message for use in a workflow command"""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsFormatter(logging.Formatter):
    """Formats records as GitHub Actions workflow commands"""

    COMMANDS = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        command = self.COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{escape_data(message)}"


def in_github_actions(environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get("GITHUB_ACTIONS") == "true"


def setup_logging(debug: bool = False, log_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
    """Configure root logging for a run"""
    handler = logging.StreamHandler()
    if in_github_actions(environ):
        handler.setFormatter(ActionsFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    handlers: List[logging.Handler] = [handler]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=handlers,
        force=True
    )
