"""Router cron: settlement automatico delle gameweek concluse."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import verify_cron_secret
from app.core.database import get_db
from app.core.responses import http_error, ok
from app.services import settlement_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"], dependencies=[Depends(verify_cron_secret)])


@router.post("/auto-settlement")
def auto_settlement(db: Session = Depends(get_db)):
    try:
        result = settlement_service.run_auto_settlement(db)
        return ok(result, message=f"Auto-settlement: {len(result['settled'])} gameweeks settled")
    except Exception as e:
        db.rollback()
        raise http_error(e, "auto_settlement")


@router.get("/auto-settlement")
def auto_settlement_preview(db: Session = Depends(get_db)):
    """Gameweek che verrebbero valutate al prossimo run."""
    try:
        return ok(settlement_service.auto_settlement_preview(db))
    except Exception as e:
        raise http_error(e, "auto_settlement_preview")
