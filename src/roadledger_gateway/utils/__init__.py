"""Utility functions package."""

from roadledger_gateway.utils.logger import configure_logging, get_logger
from roadledger_gateway.utils.redaction import safe_log_fields, sanitize_for_log

__all__ = ["configure_logging", "get_logger", "safe_log_fields", "sanitize_for_log"]
