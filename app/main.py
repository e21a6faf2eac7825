"""Fantasy Rooms: API per leghe fantasy di Premier League (FPL + Football-Data.org)."""

import logging

from fastapi import FastAPI

from app.core.database import init_db
from app.core.responses import install_exception_handlers
from app.routers import (
    admin_router,
    cron_router,
    debug_router,
    health_router,
    lineups_router,
    rooms_router,
    sync_router,
    teams_router,
)

app = FastAPI(
    title="Fantasy Rooms",
    description="Fantasy football rooms, lineups and gameweek settlement. Premier League data from FPL and Football-Data.org.",
    version="0.1.0",
)

install_exception_handlers(app)

app.include_router(health_router)
app.include_router(teams_router)
app.include_router(rooms_router)
app.include_router(lineups_router)
app.include_router(sync_router)
app.include_router(admin_router)
app.include_router(cron_router)
app.include_router(debug_router)


@app.on_event("startup")
def on_startup():
    """Inizializza le tabelle e applica le migrazioni all'avvio."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    init_db()
