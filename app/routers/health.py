"""Health check router: processo vivo e database raggiungibile."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    """Health check for load balancers and monitoring."""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.warning("Health check database non raggiungibile: %s", e)
        database = "unavailable"
    return {"status": "healthy", "database": database}
