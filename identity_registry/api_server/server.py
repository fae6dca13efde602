"""
FastAPI server — HTTP surface over the issuer-gated and open-create stores.

create_app() builds the app with one store of each variant on app.state. When
a database URL is configured, the lifespan loads saved snapshots on startup,
saves a store's snapshot after every mutation it commits, and saves both
stores again on shutdown. A failed save is logged (event_observer_failed) and
does not undo the mutation; the next successful save includes it.

Run: uvicorn identity_registry.api_server.server:app --host 0.0.0.0 --port 8000
(requires REGISTRY_ADMIN), or `python main.py`.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from identity_registry import __version__
from identity_registry.api_server.issuer_api import router as issuer_router
from identity_registry.api_server.open_api import router as open_router
from identity_registry.config import Settings, get_settings
from identity_registry.core.exceptions import (
    AlreadyExists,
    ConfigError,
    InvalidAddress,
    InvalidRecord,
    NotFound,
    RegistryError,
    Unauthorized,
)
from identity_registry.ledger import IssuerGatedStore, OpenCreateStore, RegistryEvent, RegistryStore
from identity_registry.registry_logging import get_logger

logger = get_logger(__name__)

# Most specific first: SubjectNotFound is matched by NotFound
ERROR_STATUS: list[tuple[type[RegistryError], int]] = [
    (Unauthorized, 403),
    (AlreadyExists, 409),
    (NotFound, 404),
    (InvalidAddress, 400),
    (InvalidRecord, 400),
    (ConfigError, 500),
]


def status_for(exc: RegistryError) -> int:
    for kind, status in ERROR_STATUS:
        if isinstance(exc, kind):
            return status
    return 400


def _issuer_key(settings: Settings) -> str:
    return f"{settings.registry_key}:issuer"


def _open_key(settings: Settings) -> str:
    return f"{settings.registry_key}:open"


def _build_stores(settings: Settings) -> tuple[IssuerGatedStore, OpenCreateStore]:
    if not settings.admin_address:
        raise ConfigError("REGISTRY_ADMIN must be set to the issuer/operator address")
    issuer_store = IssuerGatedStore(
        settings.registry_name,
        settings.registry_symbol,
        settings.admin_address,
        history_size=settings.event_history,
    )
    open_store = OpenCreateStore(
        settings.registry_name,
        settings.registry_symbol,
        settings.admin_address,
        history_size=settings.event_history,
    )
    return issuer_store, open_store


def _load_saved(app: FastAPI, settings: Settings) -> None:
    from identity_registry.database import init_db, load_registry

    init_db(settings.database_url)
    for key, attr, kind in (
        (_issuer_key(settings), "issuer_store", IssuerGatedStore),
        (_open_key(settings), "open_store", OpenCreateStore),
    ):
        store = load_registry(key, url=settings.database_url, history_size=settings.event_history)
        if store is None:
            logger.info("registry_snapshot_missing", key=key)
            continue
        if not isinstance(store, kind):
            raise ConfigError(f"Snapshot {key} holds a {store.variant} registry", key=key)
        setattr(app.state, attr, store)


def _save_all(app: FastAPI, settings: Settings) -> None:
    from identity_registry.database import save_registry

    save_registry(app.state.issuer_store, _issuer_key(settings), url=settings.database_url)
    save_registry(app.state.open_store, _open_key(settings), url=settings.database_url)


def _save_on_change(app: FastAPI, settings: Settings) -> list[Callable[[], None]]:
    """Subscribe a snapshot save to each store's events; returns the unsubscribe callbacks."""
    from identity_registry.database import save_registry

    unsubscribers = []
    for store, key in (
        (app.state.issuer_store, _issuer_key(settings)),
        (app.state.open_store, _open_key(settings)),
    ):
        def save(event: RegistryEvent, store: RegistryStore = store, key: str = key) -> None:
            save_registry(store, key, url=settings.database_url)

        unsubscribers.append(store.events.subscribe(save))
    return unsubscribers


def create_app(
    settings: Settings | None = None,
    *,
    issuer_store: IssuerGatedStore | None = None,
    open_store: OpenCreateStore | None = None,
) -> FastAPI:
    """
    Build the API app.

    Stores passed in are used as-is (tests); otherwise both are deployed from
    settings with REGISTRY_ADMIN as issuer/operator.
    """
    cfg = settings or get_settings()
    if issuer_store is None or open_store is None:
        default_issuer, default_open = _build_stores(cfg)
        issuer_store = issuer_store or default_issuer
        open_store = open_store or default_open

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        unsubscribers: list[Callable[[], None]] = []
        if cfg.persistence_enabled:
            _load_saved(app, cfg)
            unsubscribers = _save_on_change(app, cfg)
        logger.info(
            "api_started",
            persistence=cfg.persistence_enabled,
            issuer_records=len(app.state.issuer_store),
            open_records=len(app.state.open_store),
        )
        yield
        for unsubscribe in unsubscribers:
            unsubscribe()
        if cfg.persistence_enabled:
            _save_all(app, cfg)
        logger.info("api_stopped")

    app = FastAPI(
        title="Identity Registry API",
        description="Issuer-gated and open-create identity ledgers keyed by Solana address.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.issuer_store = issuer_store
    app.state.open_store = open_store

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
        status = status_for(exc)
        logger.warning(
            "request_rejected",
            path=request.url.path,
            method=request.method,
            error=exc.code,
            status=status,
        )
        return JSONResponse(status_code=status, content=exc.to_dict())

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness probe: API is up."""
        return {"status": "ok"}

    app.include_router(issuer_router)
    app.include_router(open_router)
    return app


_app: FastAPI | None = None


def __getattr__(name: str):
    """Lazy module-level `app` for uvicorn; built once from environment settings on first access."""
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
