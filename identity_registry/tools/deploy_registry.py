#!/usr/bin/env python3
"""
Deploy a new, empty identity registry and save it to the snapshot database.

The admin address becomes the issuer (issuer variant) or operator (open
variant) and cannot be changed afterwards.

Usage:
  python -m identity_registry.tools.deploy_registry --variant open \
      --admin 9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka [--name "Identity Tokens"] [--symbol IDT] [--key default]
"""

from __future__ import annotations

import argparse
import sys

from identity_registry.config import Settings, get_settings
from identity_registry.core.exceptions import AlreadyExists, RegistryError
from identity_registry.database import init_db, registry_exists, save_registry
from identity_registry.ledger import STORE_VARIANTS, create_store
from identity_registry.registry_logging import get_logger

logger = get_logger(__name__)


def _log(msg: str) -> None:
    print(f"[deploy_registry] {msg}")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    """Defaults come from settings (REGISTRY_NAME, REGISTRY_SYMBOL, REGISTRY_ADMIN, ...)."""
    parser = argparse.ArgumentParser(description="Deploy an identity registry")
    parser.add_argument("--variant", choices=sorted(STORE_VARIANTS), default="open")
    parser.add_argument("--name", default=settings.registry_name)
    parser.add_argument("--symbol", default=settings.registry_symbol)
    parser.add_argument("--admin", default=settings.admin_address, help="Issuer/operator address (default: REGISTRY_ADMIN)")
    parser.add_argument("--key", default=settings.registry_key, help="Snapshot key")
    parser.add_argument("--db-url", default=settings.database_url or None, help="SQLAlchemy URL (default: REGISTRY_DB_URL)")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing registry under the same key")
    return parser


def deploy(
    variant: str,
    name: str,
    symbol: str,
    admin: str,
    key: str,
    *,
    url: str | None = None,
    force: bool = False,
) -> str:
    """Create and save an empty store; returns the key it was saved under."""
    init_db(url)
    if registry_exists(key, url=url) and not force:
        raise AlreadyExists(f"Registry {key!r} already exists; pass --force to overwrite", key=key)
    store = create_store(variant, name, symbol, admin)
    save_registry(store, key, url=url)
    logger.info("registry_deploy_done", key=key, variant=variant, admin=store.admin)
    return key


def main(argv: list[str] | None = None) -> int:
    try:
        settings = get_settings()
    except RegistryError as e:
        _log(f"invalid configuration: {e}")
        return 1
    args = build_parser(settings).parse_args(argv)
    if not args.admin:
        _log("--admin (or REGISTRY_ADMIN) is required")
        return 2
    try:
        key = deploy(
            args.variant,
            args.name,
            args.symbol,
            args.admin,
            args.key,
            url=args.db_url,
            force=args.force,
        )
    except RegistryError as e:
        _log(f"deploy failed: {e}")
        return 1
    _log(f"{args.name} ({args.symbol}) {args.variant} registry deployed under key {key!r}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
