import logging
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

_HANDLER_NAME = "appraisal_api.json"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        if log_record.get("level"):
            log_record["level"] = log_record["level"].upper()
        else:
            log_record["level"] = record.levelname


def setup_logging(level: str = "INFO") -> None:
    logger = logging.getLogger()
    # create_app() may run several times per process (tests); attach one handler only
    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        log_handler = logging.StreamHandler()
        log_handler.set_name(_HANDLER_NAME)
        formatter = CustomJsonFormatter("%(timestamp) %(level) %(name) %(message)")
        log_handler.setFormatter(formatter)
        logger.addHandler(log_handler)
    logger.setLevel(level.upper())

    # Suppress verbose logs from some libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
