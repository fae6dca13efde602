"""
Identity registry API Python client.

Uses httpx. Errors returned by the server are raised as the same RegistryError
kinds the stores raise (Unauthorized, NotFound, ...), so remote callers branch
on kind exactly like in-process callers.

Usage:
    from identity_registry.client import RegistryClient
    client = RegistryClient("http://localhost:8000", caller="9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka")
    client.issuer.create_token(subject, IdentityRecord("Alice", "https://a.example", 101, ts))
"""

from __future__ import annotations

from typing import Any

import httpx

from identity_registry.core.exceptions import (
    AlreadyExists,
    InvalidAddress,
    InvalidRecord,
    NotFound,
    RegistryError,
    SubjectNotFound,
    Unauthorized,
)
from identity_registry.ledger.models import EMPTY_IDENTITY, EMPTY_PROFILE, IdentityRecord, ProfileRecord

CALLER_HEADER = "X-Caller-Address"

_ERRORS_BY_CODE: dict[str, type[RegistryError]] = {
    kind.code: kind
    for kind in (Unauthorized, AlreadyExists, NotFound, SubjectNotFound, InvalidAddress, InvalidRecord)
}


class RegistryClientError(RegistryError):
    """Raised for API failures that are not a registry error kind (transport, 5xx, validation)."""

    code = "client_error"

    def __init__(self, message: str, status_code: int | None = None, response: httpx.Response | None = None):
        super().__init__(message, status_code=status_code)
        self.status_code = status_code
        self.response = response


class _StoreClient:
    """Shared token operations for one store prefix (/issuer or /open)."""

    def __init__(self, client: RegistryClient, prefix: str) -> None:
        self._client = client
        self._prefix = prefix

    def info(self) -> dict[str, Any]:
        return self._client._request("GET", self._prefix).json()

    def _create(self, subject: str, record: IdentityRecord, caller: str | None) -> dict[str, Any]:
        return self._client._request(
            "POST", f"{self._prefix}/tokens/{subject}", json=record.to_dict(), caller=caller
        ).json()

    def _update(self, subject: str, record: IdentityRecord, caller: str | None) -> dict[str, Any]:
        return self._client._request(
            "PUT", f"{self._prefix}/tokens/{subject}", json=record.to_dict(), caller=caller
        ).json()

    def _delete(self, subject: str, caller: str | None) -> dict[str, Any]:
        return self._client._request("DELETE", f"{self._prefix}/tokens/{subject}", caller=caller).json()

    def _exists(self, subject: str) -> bool:
        return bool(self._client._request("GET", f"{self._prefix}/tokens/{subject}/exists").json()["exists"])

    def _get(self, subject: str) -> IdentityRecord:
        """No-throw read: EMPTY_IDENTITY when the subject has no record."""
        try:
            data = self._client._request("GET", f"{self._prefix}/tokens/{subject}").json()
        except NotFound:
            return EMPTY_IDENTITY
        return IdentityRecord.from_dict(data)

    def events(self, limit: int = 100) -> list[dict[str, Any]]:
        return self._client._request("GET", f"{self._prefix}/events", params={"limit": limit}).json()


class IssuerStoreClient(_StoreClient):
    def create_token(self, subject: str, record: IdentityRecord, *, caller: str | None = None) -> dict[str, Any]:
        return self._create(subject, record, caller)

    def update_identity_data(self, subject: str, record: IdentityRecord, *, caller: str | None = None) -> dict[str, Any]:
        return self._update(subject, record, caller)

    def remove_token(self, subject: str, *, caller: str | None = None) -> dict[str, Any]:
        return self._delete(subject, caller)

    def is_identity_exists(self, subject: str) -> bool:
        return self._exists(subject)

    def get_identity_data(self, subject: str) -> IdentityRecord:
        return self._get(subject)


class OpenStoreClient(_StoreClient):
    def create_token(self, subject: str, record: IdentityRecord, *, caller: str | None = None) -> dict[str, Any]:
        return self._create(subject, record, caller)

    def update_token(self, subject: str, record: IdentityRecord, *, caller: str | None = None) -> dict[str, Any]:
        return self._update(subject, record, caller)

    def delete_token(self, subject: str, *, caller: str | None = None) -> dict[str, Any]:
        return self._delete(subject, caller)

    def token_exists(self, subject: str) -> bool:
        return self._exists(subject)

    def get_token_data(self, subject: str) -> IdentityRecord:
        return self._get(subject)

    def create_profile(self, subject: str, record: ProfileRecord, *, caller: str | None = None) -> dict[str, Any]:
        """Attach the caller's profile to subject."""
        return self._client._request(
            "POST", f"{self._prefix}/profiles/{subject}", json=record.to_dict(), caller=caller
        ).json()

    def get_profile_data(self, profiler: str, subject: str) -> ProfileRecord:
        try:
            data = self._client._request("GET", f"{self._prefix}/profiles/{subject}/{profiler}").json()
        except NotFound:
            return EMPTY_PROFILE
        return ProfileRecord.from_dict(data)

    def list_profiles(self, subject: str) -> list[str]:
        return list(self._client._request("GET", f"{self._prefix}/profiles/{subject}").json()["profilers"])

    def profile_exists(self, profiler: str, subject: str) -> bool:
        return bool(
            self._client._request("GET", f"{self._prefix}/profiles/{subject}/{profiler}/exists").json()["exists"]
        )

    def delete_profile(self, profiler: str, subject: str, *, caller: str | None = None) -> dict[str, Any]:
        return self._client._request(
            "DELETE", f"{self._prefix}/profiles/{subject}/{profiler}", caller=caller
        ).json()


class RegistryClient:
    """
    Client for the identity registry API.

    caller is sent as X-Caller-Address on mutations unless a per-call caller is
    given. Pass http to reuse an existing httpx.Client (e.g. a FastAPI TestClient).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        caller: str | None = None,
        timeout: float = 30.0,
        http: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.caller = caller
        self._http = http or httpx.Client(base_url=self.base_url, timeout=timeout)
        self.issuer = IssuerStoreClient(self, "/issuer")
        self.open = OpenStoreClient(self, "/open")

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        caller: str | None = None,
    ) -> httpx.Response:
        headers: dict[str, str] = {}
        acting = caller or self.caller
        if acting:
            headers[CALLER_HEADER] = acting
        try:
            resp = self._http.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise RegistryClientError(f"Request failed: {e}") from e
        if resp.is_success:
            return resp
        raise self._error_from(resp)

    @staticmethod
    def _error_from(resp: httpx.Response) -> RegistryError:
        body: Any = None
        if resp.headers.get("content-type", "").startswith("application/json"):
            body = resp.json()
        if isinstance(body, dict) and body.get("error") in _ERRORS_BY_CODE:
            return _ERRORS_BY_CODE[body["error"]](body.get("message", ""))
        detail = body.get("detail", resp.text) if isinstance(body, dict) else resp.text
        if resp.status_code == 404:
            return NotFound(f"API error: {detail}")
        return RegistryClientError(f"API error: {detail}", status_code=resp.status_code, response=resp)

    def health(self) -> dict[str, str]:
        """Liveness probe."""
        return self._request("GET", "/health").json()

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
