from pathlib import Path
from uuid import uuid4

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, create_engine, inspect, text

from teamswap.utils.schema_sync import sync_missing_schema_objects


def test_sync_adds_column_backfills_default_and_index():
    db_path = Path(f"./schema_sync_{uuid4().hex}.db").resolve()
    engine = create_engine(f"sqlite:///{db_path}")

    base_metadata = MetaData()
    Table(
        "profiles_sync",
        base_metadata,
        Column("user_id", Integer, primary_key=True),
        Column("username", String(50), nullable=False),
    )
    base_metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(text("INSERT INTO profiles_sync (user_id, username) VALUES (1, 'alice')"))

    target_metadata = MetaData()
    table = Table(
        "profiles_sync",
        target_metadata,
        Column("user_id", Integer, primary_key=True),
        Column("username", String(50), nullable=False),
        Column("state_version", Integer, nullable=False, default=0),
        Column("bio", String(200), nullable=True),
    )
    Index("idx_profiles_sync_username", table.c.username)

    try:
        report = sync_missing_schema_objects(engine, target_metadata)

        inspector = inspect(engine)
        column_names = {row["name"] for row in inspector.get_columns("profiles_sync")}
        index_names = {row.get("name") for row in inspector.get_indexes("profiles_sync")}

        assert {"state_version", "bio"} <= column_names
        assert "idx_profiles_sync_username" in index_names
        assert sorted(report["columns"]) == ["profiles_sync.bio", "profiles_sync.state_version"]
        assert report["indexes"] == ["idx_profiles_sync_username"]
        with engine.connect() as conn:
            assert conn.execute(text("SELECT state_version FROM profiles_sync")).scalar() == 0

        # 두 번째 실행은 아무것도 추가하지 않는다.
        assert sync_missing_schema_objects(engine, target_metadata) == {"columns": [], "indexes": []}
    finally:
        engine.dispose()
        if db_path.exists():
            db_path.unlink()
