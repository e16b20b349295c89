from .clients import Client, Employee
from .messages import SENDER_TYPES, Message
from .orders import Order
from .workers import Worker, WorkerPhone

__all__ = [
    "Client",
    "Employee",
    "Message",
    "Order",
    "SENDER_TYPES",
    "Worker",
    "WorkerPhone",
]
