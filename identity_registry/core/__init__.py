"""
Core — domain exceptions shared by the ledger, database and API layers.
"""

from identity_registry.core.exceptions import (
    AlreadyExists,
    ConfigError,
    InvalidAddress,
    InvalidRecord,
    NotFound,
    RegistryError,
    SubjectNotFound,
    Unauthorized,
)

__all__ = [
    "AlreadyExists",
    "ConfigError",
    "InvalidAddress",
    "InvalidRecord",
    "NotFound",
    "RegistryError",
    "SubjectNotFound",
    "Unauthorized",
]
