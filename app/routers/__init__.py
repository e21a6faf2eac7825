from app.routers.admin import router as admin_router
from app.routers.cron import router as cron_router
from app.routers.debug import router as debug_router
from app.routers.health import router as health_router
from app.routers.lineups import router as lineups_router
from app.routers.rooms import router as rooms_router
from app.routers.sync import router as sync_router
from app.routers.teams import router as teams_router

__all__ = [
    "health_router",
    "teams_router",
    "rooms_router",
    "lineups_router",
    "sync_router",
    "admin_router",
    "cron_router",
    "debug_router",
]
