"""
Structured logging for the identity registry.

JSON logs with timestamp, event_type, subject/profiler/caller keys.
"""

from identity_registry.registry_logging.logger import bind_subject, configure_logging, get_logger

__all__ = ["bind_subject", "configure_logging", "get_logger"]
