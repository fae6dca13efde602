"""
FastAPI router for the open-create store: operator-managed tokens plus
caller-owned profiles.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from identity_registry.api_server.deps import get_caller, get_open_store
from identity_registry.api_server.schemas import (
    ExistsResponse,
    IdentityRecordIn,
    IdentityRecordOut,
    MutationResponse,
    ProfileExistsResponse,
    ProfileRecordIn,
    ProfileRecordOut,
    ProfilersResponse,
    RegistryInfoResponse,
)
from identity_registry.ledger import OpenCreateStore
router = APIRouter(prefix="/open", tags=["Open store"])


@router.get("", response_model=RegistryInfoResponse)
def open_info(store: OpenCreateStore = Depends(get_open_store)) -> RegistryInfoResponse:
    return RegistryInfoResponse(
        variant=store.variant,
        name=store.name,
        symbol=store.symbol,
        admin=store.operator,
        records=len(store),
    )


# -----------------------------------------------------------------------------
# Tokens
# -----------------------------------------------------------------------------


@router.post("/tokens/{subject}", response_model=MutationResponse, status_code=201)
def create_token(
    subject: str,
    body: IdentityRecordIn,
    caller: str = Depends(get_caller),
    store: OpenCreateStore = Depends(get_open_store),
):
    event = store.create_token(caller, subject, body.to_record())
    return JSONResponse(status_code=201, content=MutationResponse.from_event(event).model_dump())


@router.put("/tokens/{subject}", response_model=MutationResponse)
def update_token(
    subject: str,
    body: IdentityRecordIn,
    caller: str = Depends(get_caller),
    store: OpenCreateStore = Depends(get_open_store),
) -> MutationResponse:
    return MutationResponse.from_event(store.update_token(caller, subject, body.to_record()))


@router.delete("/tokens/{subject}", response_model=MutationResponse)
def delete_token(
    subject: str,
    caller: str = Depends(get_caller),
    store: OpenCreateStore = Depends(get_open_store),
) -> MutationResponse:
    return MutationResponse.from_event(store.delete_token(caller, subject))


@router.get("/tokens/{subject}/exists", response_model=ExistsResponse)
def token_exists(subject: str, store: OpenCreateStore = Depends(get_open_store)) -> ExistsResponse:
    return ExistsResponse(subject=subject.strip(), exists=store.token_exists(subject))


@router.get("/tokens/{subject}", response_model=IdentityRecordOut)
def get_token_data(subject: str, store: OpenCreateStore = Depends(get_open_store)) -> IdentityRecordOut:
    subject = subject.strip()
    if not store.token_exists(subject):
        raise HTTPException(status_code=404, detail=f"No identity record for {subject[:8]}...")
    return IdentityRecordOut.from_record(subject, store.get_token_data(subject))


# -----------------------------------------------------------------------------
# Profiles
# -----------------------------------------------------------------------------


@router.post("/profiles/{subject}", response_model=MutationResponse, status_code=201)
def create_profile(
    subject: str,
    body: ProfileRecordIn,
    caller: str = Depends(get_caller),
    store: OpenCreateStore = Depends(get_open_store),
):
    """Attach the caller's profile to subject (overwrites the caller's previous one)."""
    event = store.create_profile(caller, subject, body.to_record())
    return JSONResponse(status_code=201, content=MutationResponse.from_event(event).model_dump())


@router.get("/profiles/{subject}", response_model=ProfilersResponse)
def list_profiles(subject: str, store: OpenCreateStore = Depends(get_open_store)) -> ProfilersResponse:
    return ProfilersResponse(subject=subject.strip(), profilers=store.list_profiles(subject))


@router.get("/profiles/{subject}/{profiler}/exists", response_model=ProfileExistsResponse)
def profile_exists(
    subject: str,
    profiler: str,
    store: OpenCreateStore = Depends(get_open_store),
) -> ProfileExistsResponse:
    return ProfileExistsResponse(
        profiler=profiler.strip(),
        subject=subject.strip(),
        exists=store.profile_exists(profiler, subject),
    )


@router.get("/profiles/{subject}/{profiler}", response_model=ProfileRecordOut)
def get_profile_data(
    subject: str,
    profiler: str,
    store: OpenCreateStore = Depends(get_open_store),
) -> ProfileRecordOut:
    subject, profiler = subject.strip(), profiler.strip()
    if not store.profile_exists(profiler, subject):
        raise HTTPException(status_code=404, detail=f"No profile by {profiler[:8]}... on {subject[:8]}...")
    return ProfileRecordOut.from_record(profiler, subject, store.get_profile_data(profiler, subject))


@router.delete("/profiles/{subject}/{profiler}", response_model=MutationResponse)
def delete_profile(
    subject: str,
    profiler: str,
    caller: str = Depends(get_caller),
    store: OpenCreateStore = Depends(get_open_store),
) -> MutationResponse:
    return MutationResponse.from_event(store.delete_profile(caller, profiler, subject))


# -----------------------------------------------------------------------------
# Notifications
# -----------------------------------------------------------------------------


@router.get("/events")
def recent_events(
    limit: int = Query(100, ge=1, le=1000),
    store: OpenCreateStore = Depends(get_open_store),
) -> list[dict]:
    return [e.to_dict() for e in store.events.recent(limit)]
