import enum
from typing import Any, Dict, Optional

from sqlalchemy import exc as sa_exc


class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class RequestValidationFailed(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )


class StoreFailure(AppException):
    """A store error surfaced to the client as a 500 with the store's message."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORE_ERROR",
            details=details
        )


class StoreUnavailable(AppException):
    def __init__(self, reason: str):
        super().__init__(
            message="Database connection failed",
            status_code=500,
            error_code="STORE_UNAVAILABLE",
            details={"details": reason}
        )


class StartupError(RuntimeError):
    """Raised when the service cannot reach a servable state. Never handled."""


class StoreErrorKind(str, enum.Enum):
    UNDEFINED_TABLE = "undefined_table"
    UNDEFINED_COLUMN = "undefined_column"
    CONSTRAINT_VIOLATION = "constraint_violation"
    CONNECTION = "connection"
    OTHER = "other"


class StoreError(Exception):
    """
    A driver error translated at the store-access boundary.

    `code` is the SQLSTATE reported by PostgreSQL (None on SQLite),
    `detail` the driver's DETAIL line when there is one.
    """
    def __init__(
        self,
        kind: StoreErrorKind,
        message: str,
        code: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        self.kind = kind
        self.message = message
        self.code = code
        self.detail = detail
        super().__init__(message)

    def log_extra(self) -> Dict[str, Any]:
        return {"store_kind": self.kind.value, "store_code": self.code, "store_detail": self.detail}


# SQLSTATE values, see PostgreSQL "Appendix A. Error Codes"
_UNDEFINED_TABLE = "42P01"
_UNDEFINED_COLUMN = "42703"


def _sqlstate(orig: Any) -> Optional[str]:
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _driver_detail(orig: Any) -> Optional[str]:
    diag = getattr(orig, "diag", None)
    if diag is None:
        return None
    return getattr(diag, "message_detail", None)


def _driver_message(orig: Any) -> str:
    diag = getattr(orig, "diag", None)
    primary = getattr(diag, "message_primary", None) if diag is not None else None
    if primary:
        return primary
    return str(orig).strip()


def classify_store_error(error: BaseException) -> StoreError:
    """Map a raw SQLAlchemy/driver exception to a StoreError."""
    if isinstance(error, StoreError):
        return error

    orig = getattr(error, "orig", None) or error
    code = _sqlstate(orig)
    message = _driver_message(orig)
    detail = _driver_detail(orig)

    if code:
        if code == _UNDEFINED_TABLE:
            kind = StoreErrorKind.UNDEFINED_TABLE
        elif code == _UNDEFINED_COLUMN:
            kind = StoreErrorKind.UNDEFINED_COLUMN
        elif code.startswith("23"):
            kind = StoreErrorKind.CONSTRAINT_VIOLATION
        elif code.startswith("08"):
            kind = StoreErrorKind.CONNECTION
        else:
            kind = StoreErrorKind.OTHER
        return StoreError(kind, message, code=code, detail=detail)

    lowered = message.lower()
    if "no such table" in lowered:
        kind = StoreErrorKind.UNDEFINED_TABLE
    elif "no such column" in lowered:
        kind = StoreErrorKind.UNDEFINED_COLUMN
    elif isinstance(error, sa_exc.IntegrityError) or "constraint failed" in lowered:
        kind = StoreErrorKind.CONSTRAINT_VIOLATION
    elif isinstance(error, (sa_exc.OperationalError, sa_exc.DisconnectionError)):
        kind = StoreErrorKind.CONNECTION
    else:
        kind = StoreErrorKind.OTHER
    return StoreError(kind, message, code=code, detail=detail)
