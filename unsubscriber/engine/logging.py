"""
Structured logging for the unsubscribe engine.

This module provides structured JSON logging with context tracking,
operation timing and sensitive data filtering.
"""

import logging
import json
import time
import re
from typing import Dict, Any, Optional
from contextlib import contextmanager
from datetime import datetime, timezone


class SensitiveDataFilter:
    """Filter sensitive data from log messages."""

    def __init__(self):
        self.sensitive_patterns = [
            (re.compile(r'token=([^&\s]+)', re.IGNORECASE), 'token=***'),
            (re.compile(r'password["\']?\s*[:=]\s*["\']?([^"\'\s&]+)', re.IGNORECASE), 'password=***'),
            (re.compile(r'api_key["\']?\s*[:=]\s*["\']?([^"\'\s&]+)', re.IGNORECASE), 'api_key=***'),
            (re.compile(r'secret["\']?\s*[:=]\s*["\']?([^"\'\s&]+)', re.IGNORECASE), 'secret=***'),
            (re.compile(r'\bsk-[A-Za-z0-9_\-]{8,}'), 'sk-***'),
        ]

    def filter_message(self, message: str) -> str:
        """Filter sensitive data from a message string."""
        filtered = message
        for pattern, replacement in self.sensitive_patterns:
            filtered = pattern.sub(replacement, filtered)
        return filtered

    def filter_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Filter sensitive data from a dictionary."""
        filtered = {}
        sensitive_keys = {'password', 'token', 'api_key', 'secret', 'authorization'}

        for key, value in data.items():
            if key.lower() in sensitive_keys:
                filtered[key] = '***'
            elif isinstance(value, str):
                filtered[key] = self.filter_message(value)
            elif isinstance(value, dict):
                filtered[key] = self.filter_dict(value)
            else:
                filtered[key] = value
        return filtered


class UnsubscribeLogger:
    """Structured logger for one engine component.

    Context added with add_context() is static per component instance;
    per-attempt details go in the ``extra`` argument so concurrent attempts
    never share mutable state through the logger.
    """

    def __init__(self, component: str):
        self.component = component
        self.logger = logging.getLogger(f"unsubscribe.{component}")
        self.context: Dict[str, Any] = {}
        self.filter = SensitiveDataFilter()

    def add_context(self, key: str, value: Any) -> None:
        """Add context information to all subsequent log messages."""
        self.context[key] = value

    def _prepare_log_data(self, message: str, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'component': self.component,
            'message': self.filter.filter_message(message),
            'context': self.filter.filter_dict(self.context.copy())
        }

        if extra:
            log_data['extra'] = self.filter.filter_dict(extra)

        return log_data

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.debug(json.dumps(self._prepare_log_data(message, extra), default=str))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.info(json.dumps(self._prepare_log_data(message, extra), default=str))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.warning(json.dumps(self._prepare_log_data(message, extra), default=str))

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.error(json.dumps(self._prepare_log_data(message, extra), default=str))

    @contextmanager
    def time_operation(self, operation_name: str, extra: Optional[Dict[str, Any]] = None):
        """Context manager to time operations and log performance."""
        start_time = time.time()
        details = dict(extra or {}, operation=operation_name)
        self.debug(f"Starting {operation_name}", details)

        try:
            yield
            duration = time.time() - start_time
            self.info(f"Operation {operation_name} completed", dict(
                details, duration_seconds=round(duration, 3), status="success"
            ))
        except Exception as e:
            duration = time.time() - start_time
            self.error(f"Operation {operation_name} failed", dict(
                details, duration_seconds=round(duration, 3), status="failure", error=str(e)
            ))
            raise

    def log_exception(self, exception: Exception, extra: Optional[Dict[str, Any]] = None):
        """Log exception with full context and traceback."""
        log_data = self._prepare_log_data(f"Exception occurred: {str(exception)}", extra)
        log_data['exception'] = {
            'type': type(exception).__name__,
            'message': self.filter.filter_message(str(exception))
        }

        context = getattr(exception, 'context', None)
        if context:
            log_data['exception']['context'] = self.filter.filter_dict(context)

        self.logger.error(json.dumps(log_data, default=str), exc_info=True)


def configure_unsubscribe_logging(
    level: str = "INFO",
    format: str = "json",
    output: str = "console",
    filename: Optional[str] = None
):
    """Configure the unsubscribe logging system."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("unsubscribe")
    logger.setLevel(log_level)
    logger.handlers.clear()

    if format == "json":
        formatter = logging.Formatter('%(message)s')
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    if output in ["console", "both"]:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if output in ["file", "both"] and filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
