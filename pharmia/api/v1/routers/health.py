import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from pharmia.core.exceptions import ServiceUnavailableError
from pharmia.db.session import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

@router.get("/health", summary="État du service")
def health():
    return {"status": "ok"}

@router.get("/db-health", summary="État de la base de données")
def db_health(session: Session = Depends(get_session)):
    try:
        session.exec(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Base de données injoignable", exc_info=True)
        raise ServiceUnavailableError("Base de données injoignable.") from exc
    return {"status": "ok", "database": "reachable"}
