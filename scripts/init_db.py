"""Initialize the database - creates all tables and adds missing columns/indexes."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from teamswap.database import engine, Base
import teamswap.models  # noqa: F401 - registers all models
from teamswap.utils.schema_sync import sync_missing_schema_objects


def init_db():
    print("Creating all database tables...")
    Base.metadata.create_all(bind=engine)
    report = sync_missing_schema_objects(engine, Base.metadata)
    for name in report["columns"]:
        print(f"  added column {name}")
    for name in report["indexes"]:
        print(f"  created index {name}")
    print("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
