from sqlalchemy import inspect

from appraisal_api.core.config import get_settings
from appraisal_api.core.schema import TABLE_NAME
from appraisal_api.database import build_engine


def check_schema():
    settings = get_settings()
    engine = build_engine(settings.database_url)
    inspector = inspect(engine)

    print(f"--- Checking Schema for {engine.url.render_as_string(hide_password=True)} ---")

    if not inspector.has_table(TABLE_NAME):
        print(f"Table {TABLE_NAME} not found. Run scripts/init_db.py first.")
        engine.dispose()
        return

    print(f"\nTable: {TABLE_NAME}")
    for col in inspector.get_columns(TABLE_NAME):
        print(f"  - {col['name']} ({col['type']})")

    print("\nCheck constraints:")
    for check in inspector.get_check_constraints(TABLE_NAME):
        print(f"  - {check.get('name')}: {check['sqltext']}")

    print("\nIndexes:")
    for index in inspector.get_indexes(TABLE_NAME):
        print(f"  - {index['name']} on {', '.join(c for c in index['column_names'] if c)}")

    engine.dispose()


if __name__ == "__main__":
    check_schema()
