from routes.admin import api_router as admin_api_router
from routes.admin import page_router as admin_page_router
from routes.health import router as health_router
from routes.waitlist import router as waitlist_router

__all__ = ["admin_api_router", "admin_page_router", "health_router", "waitlist_router"]
