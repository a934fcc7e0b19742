import logging
from typing import List

from sqlalchemy.orm import Session

from appraisal_api.core.exceptions import (
    RequestValidationFailed,
    StoreError,
    StoreErrorKind,
    StoreFailure,
    StoreUnavailable,
)
from appraisal_api.repositories.appraisal_repo import AppraisalRepository
from appraisal_api.schemas.appraisal import AppraisalCreate, AppraisalResponse

logger = logging.getLogger(__name__)

MISSING_TABLE_MESSAGE = "Appraisals table does not exist. Initialize the database first."


class AppraisalService:
    """
    Request-level operations on appraisals.

    Store failures arrive already classified; this layer decides which kinds
    are recovered from and turns the rest into HTTP-facing exceptions.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppraisalRepository(db)

    def _log_store_error(self, action: str, error: StoreError) -> None:
        logger.error(
            f"{action} failed: {error.message}",
            exc_info=error,
            extra=error.log_extra(),
        )

    def check_health(self) -> None:
        try:
            self.repo.ping()
        except StoreError as e:
            self._log_store_error("Health check", e)
            raise StoreUnavailable(e.message) from e

    def list_appraisals(self) -> List[AppraisalResponse]:
        try:
            rows = self.repo.list_ordered()
        except StoreError as e:
            if e.kind is not StoreErrorKind.UNDEFINED_COLUMN:
                self._raise_list_failure(e)
            logger.warning(
                f"Ordering column missing, listing appraisals unordered: {e.message}",
                extra=e.log_extra(),
            )
            try:
                rows = self.repo.list_unordered()
            except StoreError as fallback_error:
                self._raise_list_failure(fallback_error)
        return [AppraisalResponse.model_validate(row) for row in rows]

    def _raise_list_failure(self, error: StoreError):
        self._log_store_error("Listing appraisals", error)
        if error.kind is StoreErrorKind.UNDEFINED_TABLE:
            raise StoreFailure(MISSING_TABLE_MESSAGE) from error
        raise StoreFailure(error.message) from error

    def create_appraisal(self, payload: AppraisalCreate) -> AppraisalResponse:
        missing = payload.missing_fields()
        if missing:
            logger.warning(f"Rejected appraisal with missing fields: {missing}")
            raise RequestValidationFailed("All fields are required", details={"missing": missing})

        try:
            row = self.repo.create(
                employee_name=payload.employee_name,
                employee_id=payload.employee_id,
                task_name=payload.task_name,
                feedback=payload.feedback,
                rating=payload.rating,
            )
        except StoreError as e:
            # Constraint violations are not told apart from other store errors
            self._log_store_error("Creating appraisal", e)
            raise StoreFailure(e.message) from e
        return AppraisalResponse.model_validate(row)
