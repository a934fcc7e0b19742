"""
Data access for the `appraisals` table.

Each method issues a single statement. Driver errors are rolled back and
translated into StoreError here, so nothing above this layer looks at
SQLSTATE codes or driver messages.
"""
import logging
from typing import Any, Dict, List, NoReturn

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from appraisal_api.core.exceptions import classify_store_error

logger = logging.getLogger(__name__)

_PING_SQL = "SELECT 1"
_LIST_ORDERED_SQL = "SELECT * FROM appraisals ORDER BY created_at DESC, id DESC"
_LIST_UNORDERED_SQL = "SELECT * FROM appraisals"
_INSERT_SQL = """
    INSERT INTO appraisals (employee_name, employee_id, task_name, feedback, rating)
    VALUES (:employee_name, :employee_id, :task_name, :feedback, :rating)
    RETURNING *
"""


class AppraisalRepository:
    """Thin query wrapper around a request-scoped session."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, error: SQLAlchemyError) -> NoReturn:
        self.db.rollback()
        store_error = classify_store_error(error)
        raise store_error from error

    def ping(self) -> None:
        try:
            self.db.execute(text(_PING_SQL)).scalar()
        except SQLAlchemyError as e:
            self._fail(e)

    def list_ordered(self) -> List[Dict[str, Any]]:
        """All appraisals, most recent first."""
        try:
            result = self.db.execute(text(_LIST_ORDERED_SQL))
            return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            self._fail(e)

    def list_unordered(self) -> List[Dict[str, Any]]:
        try:
            result = self.db.execute(text(_LIST_UNORDERED_SQL))
            return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            self._fail(e)

    def create(
        self,
        employee_name: str,
        employee_id: str,
        task_name: str,
        feedback: str,
        rating: int,
    ) -> Dict[str, Any]:
        """
        Insert one appraisal.

        Returns:
            The stored row, including the generated `id` and `created_at`.
        """
        params = {
            "employee_name": employee_name,
            "employee_id": employee_id,
            "task_name": task_name,
            "feedback": feedback,
            "rating": rating,
        }
        try:
            row = self.db.execute(text(_INSERT_SQL), params).mappings().one()
            created = dict(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail(e)
        logger.info(f"Created appraisal #{created['id']} for employee {employee_id}")
        return created
