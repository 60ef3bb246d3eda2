"""API root: liveness plus a database connectivity check."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blog_api.api.deps import get_settings
from blog_api.core.config import Settings
from blog_api.core.database import check_db_connected, get_db
from blog_api.schemas.health import HealthResponse

API_VERSION = "1.0.0"

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        version=API_VERSION,
        environment=settings.APP_ENV,
        database=db_status,
        timestamp=datetime.now(UTC),
    )
