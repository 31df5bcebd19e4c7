from pydantic import BaseModel, Field
from datetime import datetime


class SyncReportOut(BaseModel):
    job_name: str
    state: str
    total: int = Field(..., ge=0)
    offset: int | None = None
    fetched: int = Field(..., ge=0)
    upserted: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    next_offset: int | None = None


class TokenRefreshOut(BaseModel):
    feed_name: str
    expires_at: datetime


class JobRunOut(BaseModel):
    id: int
    job_name: str
    status: str
    started_at: datetime
    finished_at: datetime | None = None
    error: str | None = None
    summary_json: str | None = None


class SyncCursorOut(BaseModel):
    job_name: str
    offset: int
