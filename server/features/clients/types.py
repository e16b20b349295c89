from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ClientCreateInput(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    phone_number: str = Field(min_length=1, max_length=15)


class ClientUpdateInput(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class ClientSummary(BaseModel):
    phone_number: str
    name: str
    created_at: datetime
    updated_at: datetime


class ClientList(BaseModel):
    count: int
    clients: list[ClientSummary]
