"""
FastAPI router for the issuer-gated store.

POST/PUT/DELETE /issuer/tokens/{subject} require X-Caller-Address; the store
decides whether that caller may act (issuer, or the subject for DELETE).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from identity_registry.api_server.deps import get_caller, get_issuer_store
from identity_registry.api_server.schemas import (
    ExistsResponse,
    IdentityRecordIn,
    IdentityRecordOut,
    MutationResponse,
    RegistryInfoResponse,
)
from identity_registry.ledger import IssuerGatedStore
router = APIRouter(prefix="/issuer", tags=["Issuer store"])


@router.get("", response_model=RegistryInfoResponse)
def issuer_info(store: IssuerGatedStore = Depends(get_issuer_store)) -> RegistryInfoResponse:
    return RegistryInfoResponse(
        variant=store.variant,
        name=store.name,
        symbol=store.symbol,
        admin=store.issuer,
        records=len(store),
    )


@router.post("/tokens/{subject}", response_model=MutationResponse, status_code=201)
def create_token(
    subject: str,
    body: IdentityRecordIn,
    caller: str = Depends(get_caller),
    store: IssuerGatedStore = Depends(get_issuer_store),
):
    event = store.create_token(caller, subject, body.to_record())
    return JSONResponse(status_code=201, content=MutationResponse.from_event(event).model_dump())


@router.put("/tokens/{subject}", response_model=MutationResponse)
def update_identity_data(
    subject: str,
    body: IdentityRecordIn,
    caller: str = Depends(get_caller),
    store: IssuerGatedStore = Depends(get_issuer_store),
) -> MutationResponse:
    return MutationResponse.from_event(store.update_identity_data(caller, subject, body.to_record()))


@router.delete("/tokens/{subject}", response_model=MutationResponse)
def remove_token(
    subject: str,
    caller: str = Depends(get_caller),
    store: IssuerGatedStore = Depends(get_issuer_store),
) -> MutationResponse:
    return MutationResponse.from_event(store.remove_token(caller, subject))


@router.get("/tokens/{subject}/exists", response_model=ExistsResponse)
def is_identity_exists(subject: str, store: IssuerGatedStore = Depends(get_issuer_store)) -> ExistsResponse:
    return ExistsResponse(subject=subject.strip(), exists=store.is_identity_exists(subject))


@router.get("/tokens/{subject}", response_model=IdentityRecordOut)
def get_identity_data(subject: str, store: IssuerGatedStore = Depends(get_issuer_store)) -> IdentityRecordOut:
    """Return the subject's record; 404 when it has none."""
    subject = subject.strip()
    if not store.is_identity_exists(subject):
        raise HTTPException(status_code=404, detail=f"No identity record for {subject[:8]}...")
    return IdentityRecordOut.from_record(subject, store.get_identity_data(subject))


@router.get("/events")
def recent_events(
    limit: int = Query(100, ge=1, le=1000),
    store: IssuerGatedStore = Depends(get_issuer_store),
) -> list[dict]:
    return [e.to_dict() for e in store.events.recent(limit)]
