from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from appraisal_api.database import get_db
from appraisal_api.schemas.appraisal import HealthResponse
from appraisal_api.services.appraisal_service import AppraisalService

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """Liveness probe that also round-trips the database."""
    AppraisalService(db).check_health()
    return {"status": "healthy", "database": "connected"}
