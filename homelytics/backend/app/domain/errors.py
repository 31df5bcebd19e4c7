# app/domain/errors.py
from __future__ import annotations


class SyncError(Exception):
    """Base for failures that abort a listing sync run."""


class CredentialError(SyncError):
    """Token endpoint unreachable, non-2xx, or returned an unusable payload."""


class FeedError(SyncError):
    pass


class FeedHTTPError(FeedError):
    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is None:
            return base
        return f"{base} (HTTP {self.status_code}: {self.body or ''})"


class MalformedPayloadError(FeedError):
    pass


class SyncBusyError(SyncError):
    """Another process holds the lease for this job."""

    def __init__(self, job_name: str, owner: str | None = None) -> None:
        super().__init__(f"sync job {job_name!r} is already running" + (f" (owner={owner})" if owner else ""))
        self.job_name = job_name
        self.owner = owner
