"""Request/response models for the registry API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from identity_registry.ledger import IdentityRecord, ProfileRecord, RegistryEvent


class IdentityRecordIn(BaseModel):
    """POST/PUT body for an identity record."""

    subject_label: str = Field(..., max_length=1024, description="Display label for the subject")
    reference_url: str = Field(..., max_length=2048, description="Reference URL")
    reference_number: int = Field(..., ge=0, description="Unsigned reference number")
    last_updated: int = Field(..., ge=0, description="Unix timestamp set by the writer")

    def to_record(self) -> IdentityRecord:
        return IdentityRecord(
            subject_label=self.subject_label,
            reference_url=self.reference_url,
            reference_number=self.reference_number,
            last_updated=self.last_updated,
        )


class IdentityRecordOut(IdentityRecordIn):
    subject: str = Field(..., description="Subject address (base58)")

    @classmethod
    def from_record(cls, subject: str, record: IdentityRecord) -> IdentityRecordOut:
        return cls(subject=subject, **record.to_dict())


class ProfileRecordIn(BaseModel):
    """POST body for a profile; the profiler is the caller."""

    label: str = Field(..., max_length=1024)
    url: str = Field(..., max_length=2048)
    score: int = Field(..., ge=0)
    timestamp: int = Field(..., ge=0)

    def to_record(self) -> ProfileRecord:
        return ProfileRecord(label=self.label, url=self.url, score=self.score, timestamp=self.timestamp)


class ProfileRecordOut(ProfileRecordIn):
    profiler: str
    subject: str

    @classmethod
    def from_record(cls, profiler: str, subject: str, record: ProfileRecord) -> ProfileRecordOut:
        return cls(profiler=profiler, subject=subject, **record.to_dict())


class RegistryInfoResponse(BaseModel):
    variant: str
    name: str
    symbol: str
    admin: str = Field(..., description="Issuer or operator address")
    records: int


class ExistsResponse(BaseModel):
    subject: str
    exists: bool


class ProfileExistsResponse(BaseModel):
    profiler: str
    subject: str
    exists: bool


class ProfilersResponse(BaseModel):
    subject: str
    profilers: list[str] = Field(default_factory=list)


class MutationResponse(BaseModel):
    """Result of a successful mutation: the notification it emitted."""

    ok: bool = True
    event: dict[str, Any]

    @classmethod
    def from_event(cls, event: RegistryEvent | None) -> MutationResponse:
        return cls(event=event.to_dict() if event else {})


class ErrorResponse(BaseModel):
    error: str
    message: str
