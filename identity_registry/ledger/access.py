"""
Capability check for role-gated mutations.

Stores pass the caller and the set of addresses allowed to perform an action
(the role holder, and for some actions the subject or profiler itself).
"""

from __future__ import annotations

from typing import Iterable

from identity_registry.core.exceptions import Unauthorized
from identity_registry.registry_logging import get_logger

logger = get_logger(__name__)


def require_caller(caller: str, allowed: Iterable[str], action: str) -> None:
    """
    Raise Unauthorized unless caller is one of the allowed addresses.

    Args:
        caller: Normalized address performing the action.
        allowed: Normalized addresses holding the required role for this action.
        action: Operation name, used in the error and the log line.
    """
    if caller in set(allowed):
        return
    logger.warning("access_denied", action=action, caller=caller)
    raise Unauthorized(f"{caller} is not allowed to {action}", caller=caller, action=action)
