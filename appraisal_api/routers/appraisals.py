from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from appraisal_api.database import get_db
from appraisal_api.schemas.appraisal import AppraisalCreate, AppraisalResponse
from appraisal_api.services.appraisal_service import AppraisalService

router = APIRouter(prefix="/appraisals")


@router.get("", response_model=List[AppraisalResponse])
def list_appraisals(db: Session = Depends(get_db)):
    return AppraisalService(db).list_appraisals()


@router.post("", response_model=AppraisalResponse, status_code=status.HTTP_201_CREATED)
def create_appraisal(payload: AppraisalCreate, db: Session = Depends(get_db)):
    """Store a new appraisal and return it with its generated id and timestamp."""
    return AppraisalService(db).create_appraisal(payload)
