from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, StrictInt
from pydantic.alias_generators import to_camel

REQUIRED_FIELDS = ("employee_name", "employee_id", "task_name", "feedback", "rating")


class AppraisalCreate(BaseModel):
    """
    Incoming appraisal. Every field is optional at the parsing stage so that
    missing values are reported together by the service as one 400, instead
    of field-by-field parser errors. Format and range are not checked here;
    the table constraints are the enforcement point.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    employee_name: Optional[str] = None
    employee_id: Optional[str] = None
    task_name: Optional[str] = None
    feedback: Optional[str] = None
    # JSON integers only; true or "5" are not coerced
    rating: Optional[StrictInt] = None

    def missing_fields(self) -> List[str]:
        """camelCase names of fields that are absent, null or empty."""
        missing = []
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or value == "":
                missing.append(to_camel(name))
        return missing


class AppraisalResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    employee_name: str
    employee_id: str
    task_name: str
    feedback: str
    rating: int
    # Absent when the list falls back to a table without the column
    created_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    status: str
    database: str
