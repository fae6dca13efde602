"""Address validation utilities."""

from __future__ import annotations

from solders.pubkey import Pubkey

from identity_registry.core.exceptions import InvalidAddress


def normalize_address(value: str, field: str = "address") -> str:
    """
    Strip and validate a Solana address; return its canonical base58 form.

    Raises:
        InvalidAddress: if value is empty or not a valid public key.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidAddress(f"{field} must be non-empty", field=field)
    raw = value.strip()
    try:
        return str(Pubkey.from_string(raw))
    except Exception as e:
        raise InvalidAddress(f"Invalid Solana address for {field}: {raw[:16]}", field=field) from e


def is_valid_address(value: str) -> bool:
    """Return True if value is a valid Solana (Pubkey) address."""
    try:
        normalize_address(value)
        return True
    except InvalidAddress:
        return False
