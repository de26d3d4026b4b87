"""Logging setup shared by the file server, the transfer engine and the CLI."""

import logging
import os
import re
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_MASK = r'\1***MASKED***'

# Signed request URLs and connection strings end up in request logs.
SECRET_PATTERNS = [
    (re.compile(r'([?&]sig=)([^&\s]+)', re.IGNORECASE), _MASK),
    (re.compile(r'(account[_-]?key["\']?\s*[:=]\s*["\']?)([^"\'}\s,;]+)', re.IGNORECASE), _MASK),
    (re.compile(r'(api[_-]?key["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE), _MASK),
    (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE), _MASK),
    (re.compile(r'(authorization["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE), _MASK),
    (re.compile(r'(bearer\s+)([^\s,}\'\"]+)', re.IGNORECASE), _MASK),
]


def mask_secrets(text: str) -> str:
    """Replace access signatures, account keys and bearer tokens in `text`."""
    for pattern, replacement in SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SensitiveDataFilter(logging.Filter):
    """
    Masks secrets in a record's message and its %-style arguments.

    Request logs carry full URLs, so a shared-access signature would
    otherwise be written out verbatim.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = mask_secrets(record.msg)

        if isinstance(record.args, dict):
            record.args = {k: mask_secrets(v) if isinstance(v, str) else v for k, v in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(mask_secrets(a) if isinstance(a, str) else a for a in record.args)

        return True


def setup_logging(component_name: str, log_level: Optional[str] = None) -> logging.Logger:
    """
    Attach a masked stdout handler to a component's root logger.

    Module loggers below the component ('transfer.engine' under 'transfer')
    propagate to it. Calling this again for the same component only updates
    the level.

    Args:
        component_name: 'fileserver', 'transfer' or 'cli'
        log_level: Level name; defaults to the LOG_LEVEL env var, then INFO.
            Unknown names fall back to INFO.

    Returns:
        The component logger
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(SensitiveDataFilter())

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
