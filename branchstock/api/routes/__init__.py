"""API route modules."""

from branchstock.api.routes.health import router as health_router
from branchstock.api.routes.ledgers import router as ledgers_router
from branchstock.api.routes.movements import router as movements_router
from branchstock.api.routes.transfers import router as transfers_router

__all__ = [
    "health_router",
    "ledgers_router",
    "movements_router",
    "transfers_router",
]
