"""Route handlers for Web API."""

from hifz.web.routes.health import router as health_router
from hifz.web.routes.loo7 import router as loo7_router
from hifz.web.routes.students import router as students_router

__all__ = [
    "health_router",
    "loo7_router",
    "students_router",
]
