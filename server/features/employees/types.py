from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class EmployeeCreateInput(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    phone_number: str = Field(min_length=1, max_length=15)
    password: str = Field(min_length=1, max_length=72)


class EmployeeUpdateInput(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    password: str | None = Field(default=None, min_length=1, max_length=72)


class EmployeeSummary(BaseModel):
    id: str
    name: str
    phone_number: str
    created_at: datetime
    updated_at: datetime


class EmployeeList(BaseModel):
    count: int
    employees: list[EmployeeSummary]
