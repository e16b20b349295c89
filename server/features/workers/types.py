from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class WorkerCreateInput(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    primary_phone: str = Field(min_length=1, max_length=15)
    secondary_phone: str | None = Field(default=None, max_length=15)


class WorkerUpdateInput(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    primary_phone: str | None = Field(default=None, max_length=15)
    secondary_phone: str | None = Field(default=None, max_length=15)


class WorkerPhoneSummary(BaseModel):
    phone_number: str
    is_primary: bool


class WorkerSummary(BaseModel):
    id: int
    name: str
    phones: list[WorkerPhoneSummary]
    created_at: datetime
    updated_at: datetime


class WorkerList(BaseModel):
    count: int
    workers: list[WorkerSummary]


class WorkerDeleted(BaseModel):
    message: str = "Worker deleted successfully"
    worker_id: int
    phone_number: str
