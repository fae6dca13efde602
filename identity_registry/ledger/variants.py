"""Lookup of store classes by variant name, used by persistence, the API and tools."""

from __future__ import annotations

from identity_registry.core.exceptions import ConfigError
from identity_registry.ledger.base import RegistryStore
from identity_registry.ledger.events import DEFAULT_HISTORY_SIZE
from identity_registry.ledger.issuer_store import IssuerGatedStore
from identity_registry.ledger.models import RegistrySnapshot
from identity_registry.ledger.open_store import OpenCreateStore

STORE_VARIANTS: dict[str, type[IssuerGatedStore] | type[OpenCreateStore]] = {
    IssuerGatedStore.variant: IssuerGatedStore,
    OpenCreateStore.variant: OpenCreateStore,
}


def _store_class(variant: str) -> type[IssuerGatedStore] | type[OpenCreateStore]:
    try:
        return STORE_VARIANTS[variant]
    except KeyError:
        raise ConfigError(
            f"Unknown registry variant {variant!r}; expected one of {sorted(STORE_VARIANTS)}",
            variant=variant,
        ) from None


def create_store(
    variant: str,
    name: str,
    symbol: str,
    admin: str,
    *,
    history_size: int = DEFAULT_HISTORY_SIZE,
) -> RegistryStore:
    """Deploy an empty store of the given variant with admin as issuer/operator."""
    return _store_class(variant)(name, symbol, admin, history_size=history_size)


def restore_store(snapshot: RegistrySnapshot, *, history_size: int = DEFAULT_HISTORY_SIZE) -> RegistryStore:
    return _store_class(snapshot.variant).from_snapshot(snapshot, history_size=history_size)
