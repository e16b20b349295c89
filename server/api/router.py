from fastapi import APIRouter

from server.features.clients.api import router as clients_router
from server.features.employees.api import router as employees_router
from server.features.media.api import router as media_router
from server.features.messages.api import router as messages_router
from server.features.orders.api import router as orders_router
from server.features.workers.api import router as workers_router

api_router = APIRouter()
api_router.include_router(clients_router)
api_router.include_router(employees_router)
api_router.include_router(media_router)
api_router.include_router(messages_router)
api_router.include_router(orders_router)
api_router.include_router(workers_router)
