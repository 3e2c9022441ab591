from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from psycopg2.extensions import connection as PGConnection
from ..db.connections import get_engine

from .base import BaseExtractor, TableInfo, ColumnInfo

log = logging.getLogger(__name__)


class PostgresExtractor(BaseExtractor):
    """
    BaseExtractor для PostgreSQL: information_schema + pg_catalog
    через raw psycopg2-соединение из общего пула SQLAlchemy.
    """

    def __init__(self, conn_params: Dict[str, Any]):
        super().__init__(conn_params)
        self._engine = None
        self.conn: Optional[PGConnection] = None
        self.cursor = None

    def connect(self) -> None:
        if self.conn is not None:
            return
        dbname = self.conn_params["dbname"]  # обязательный ключ
        self._engine = get_engine(dbname)
        raw = self._engine.raw_connection()
        # только SELECT'ы: транзакция не нужна
        raw.autocommit = True
        self.conn = raw
        self.cursor = raw.cursor()

    def close(self) -> None:
        if self.cursor is not None:
            self.cursor.close()
        if self.conn is not None:
            # возвращаем соединение в пул
            self.conn.close()
        self.cursor = None
        self.conn = None
        self._engine = None

    def list_tables(
        self,
        *,
        schemas: Optional[List[str]] = None,
        include_views: bool = False,
    ) -> List[TableInfo]:
        self.connect()

        where = ["table_schema NOT IN ('pg_catalog','information_schema')"]
        params: List[Any] = []

        if not include_views:
            where.append("table_type = 'BASE TABLE'")

        if schemas:
            where.append("table_schema = ANY(%s)")
            params.append(schemas)

        sql = f"""
            SELECT table_schema, table_name, table_type
            FROM information_schema.tables
            WHERE {" AND ".join(where)}
            ORDER BY table_schema, table_name
        """

        self.cursor.execute(sql, params or None)
        rows = self.cursor.fetchall()
        log.debug("[schema] %d table(s) in %s", len(rows), self.conn_params["dbname"])

        return [
            TableInfo(schema=r[0], table_name=r[1], table_type=r[2])
            for r in rows
        ]

    def list_columns(self, table_schema: str, table_name: str) -> List[ColumnInfo]:
        self.connect()

        # format_type даёт "integer", "numeric(10,2)", "character varying(50)"
        sql = """
            SELECT
                a.attnum AS ordinal_position,
                a.attname AS column_name,
                pg_catalog.format_type(a.atttypid, a.atttypmod) AS formatted_type,
                NOT a.attnotnull AS is_nullable
            FROM pg_catalog.pg_attribute a
            JOIN pg_catalog.pg_class c ON c.oid = a.attrelid
            JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
            WHERE n.nspname = %s
              AND c.relname = %s
              AND a.attnum > 0
              AND NOT a.attisdropped
            ORDER BY a.attnum
        """
        self.cursor.execute(sql, (table_schema, table_name))
        rows = self.cursor.fetchall()

        return [
            ColumnInfo(
                name=r[1],
                data_type=r[2],
                is_nullable=bool(r[3]),
                ordinal_position=int(r[0]),
            )
            for r in rows
        ]
