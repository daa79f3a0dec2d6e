"""런타임 스키마 동기화 유틸리티.

create_all 은 기존 테이블을 변경하지 않으므로, 배포 후 모델에 추가된 컬럼(예: profiles.state_version,
projects.member_count)과 인덱스를 기존 DB 에 보충한다.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.schema import Column, CreateColumn, CreateIndex, MetaData

logger = logging.getLogger(__name__)


def _scalar_default(column: Column):
    default = column.default
    if default is None or not getattr(default, "is_scalar", False):
        return None
    return default.arg


def sync_missing_schema_objects(engine: Engine, metadata: MetaData) -> Dict[str, List[str]]:
    """모델 메타데이터 기준으로 누락된 컬럼/인덱스를 DB에 추가하고 추가 내역을 돌려준다."""
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    preparer = engine.dialect.identifier_preparer
    report: Dict[str, List[str]] = {"columns": [], "indexes": []}

    with engine.begin() as conn:
        for table in metadata.sorted_tables:
            if table.name not in existing_tables:
                continue

            existing_columns = {
                str(row.get("name"))
                for row in inspector.get_columns(table.name)
                if row.get("name")
            }
            table_sql = preparer.format_table(table)

            for column in table.columns:
                if column.name in existing_columns or column.primary_key:
                    continue
                column_sql = str(CreateColumn(column).compile(dialect=engine.dialect)).strip()
                # NOT NULL 컬럼은 기존 행 때문에 바로 추가할 수 없어 nullable 로 추가 후 기본값을 채운다.
                column_sql = column_sql.replace(" NOT NULL", "")
                conn.execute(text(f"ALTER TABLE {table_sql} ADD COLUMN {column_sql}"))
                value = _scalar_default(column)
                if value is not None:
                    column_name = preparer.quote(column.name)
                    conn.execute(
                        text(f"UPDATE {table_sql} SET {column_name} = :value WHERE {column_name} IS NULL"),
                        {"value": value},
                    )
                report["columns"].append(f"{table.name}.{column.name}")
                logger.info("[schema] added column %s.%s", table.name, column.name)

            existing_index_names = {
                str(row.get("name"))
                for row in inspector.get_indexes(table.name)
                if row.get("name")
            }
            for index in table.indexes:
                if not index.name or index.name in existing_index_names:
                    continue
                conn.execute(CreateIndex(index))
                report["indexes"].append(index.name)
                logger.info("[schema] created index %s on %s", index.name, table.name)
    return report
