from taskboard.api.tasks import router as tasks_router
from taskboard.api.users import router as users_router

__all__ = ["tasks_router", "users_router"]
