"""
Bootstrap the appraisals schema without starting the HTTP server.

    python scripts/init_db.py
"""
import sys

from appraisal_api.core.config import get_settings
from appraisal_api.core.logging import setup_logging
from appraisal_api.core.schema import initialize_database
from appraisal_api.database import build_engine, connect_with_retry


def init_db() -> int:
    settings = get_settings()
    setup_logging(settings.log_level)
    engine = build_engine(settings.database_url)
    try:
        result = connect_with_retry(engine, settings.db_connect_attempts, settings.db_connect_delay)
        if not result.ok:
            print(f"Database unreachable after {result.attempts} attempts: {result.error}")
            return 1
        created = initialize_database(engine)
        print("Created table 'appraisals'." if created else "Table 'appraisals' already exists.")
        return 0
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(init_db())
