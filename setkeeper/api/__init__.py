from setkeeper.api.checklist import router as checklist_router
from setkeeper.api.health import router as health_router
from setkeeper.api.search import router as search_router
from setkeeper.api.sets import router as sets_router

__all__ = [
    "checklist_router",
    "health_router",
    "search_router",
    "sets_router",
]
