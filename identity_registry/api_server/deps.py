"""FastAPI dependencies: caller identity and the stores held on app.state."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request

from identity_registry.ledger import IssuerGatedStore, OpenCreateStore

CALLER_HEADER = "X-Caller-Address"


def get_caller(x_caller_address: str | None = Header(None, alias=CALLER_HEADER)) -> str:
    """Acting address for a mutation. Validated by the store."""
    caller = (x_caller_address or "").strip()
    if not caller:
        raise HTTPException(status_code=401, detail=f"{CALLER_HEADER} header is required")
    return caller


def get_issuer_store(request: Request) -> IssuerGatedStore:
    return request.app.state.issuer_store


def get_open_store(request: Request) -> OpenCreateStore:
    return request.app.state.open_store
