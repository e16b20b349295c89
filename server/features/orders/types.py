from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ClientDetails(BaseModel):
    phone: str = Field(min_length=1, max_length=15)


class EmployeeDetails(BaseModel):
    code: str | None
    name: str | None


class OrderCreateInput(BaseModel):
    client_details: ClientDetails
    jewellery_details: dict[str, Any]
    worker_phone: str | None = Field(default=None, max_length=15)
    employee_code: str | None = Field(default=None, max_length=10)


class OrderUpdateInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    client_details: ClientDetails | None = None
    jewellery_details: dict[str, Any] | None = None
    worker_phone: str | None = Field(default=None, max_length=15)


class OrderReassignInput(BaseModel):
    worker_phone: str = Field(min_length=1, max_length=15)


class OrderSummary(BaseModel):
    order_id: str
    client_details: ClientDetails
    worker_phone: str | None
    employee_details: EmployeeDetails
    jewellery_details: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class OrderList(BaseModel):
    orders: list[OrderSummary]


class OrderCreated(BaseModel):
    message: str = "Order created successfully"
    order_id: str
    created_at: datetime


class OrderReassigned(BaseModel):
    message: str = "Order reassigned successfully"
    order_id: str
    old_worker_phone: str | None
    new_worker_phone: str
    order: OrderSummary


class OrderDeleted(BaseModel):
    message: str = "Order deleted successfully"
    order_id: str
