from .base import Base
from .models import Client, Employee, Message, Order, Worker, WorkerPhone

__all__ = [
    "Base",
    "Client",
    "Employee",
    "Message",
    "Order",
    "Worker",
    "WorkerPhone",
]
