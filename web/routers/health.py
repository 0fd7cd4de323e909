"""Health check endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from osbuild_operator import __version__
from web.deps import get_db

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db)) -> dict[str, str]:
    """Report liveness and whether the object store answers.

    Raises:
        HTTPException: 503 if the database cannot be queried.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "store_unavailable", "message": str(e)},
        ) from None
    return {"status": "ok", "store": "ok", "version": __version__}


@router.get("/")
def root() -> dict[str, str]:
    """API name and version."""
    return {"name": "osbuild operator API", "version": __version__}
