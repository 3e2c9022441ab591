# dbadmin/repositories/schema_repository.py
from __future__ import annotations
import logging
from typing import Callable, Dict, List, Optional

from dbadmin.extractors.base import BaseExtractor
from dbadmin.extractors.postgres import PostgresExtractor

log = logging.getLogger(__name__)


def _display_name(schema: str, table: str) -> str:
    """'public.users' показываем как 'users', остальные схемы: полным именем."""
    return table if schema == "public" else f"{schema}.{table}"


class SchemaRepository:
    """
    Снимок схемы для конструктора DELETE:
        {"tables": [{"name": "users", "columns": [{"name": "id", "data_type": "integer"}, ...]}]}
    Источник читается заново при каждом snapshot(); кеша нет.
    """

    def __init__(
        self,
        dbname: str,
        extractor_factory: Optional[Callable[[Dict], BaseExtractor]] = None,
    ):
        self.dbname = dbname
        self.extractor_factory = extractor_factory or PostgresExtractor

    def snapshot(self, schemas: Optional[List[str]] = None) -> dict:
        tables = []
        ext = self.extractor_factory({"dbname": self.dbname})
        with ext:
            for t, cols in ext.iter_tables_with_columns(schemas=schemas):
                tables.append({
                    "name": _display_name(t["schema"], t["table_name"]),
                    "columns": [
                        {"name": c["name"], "data_type": c.get("data_type") or ""}
                        for c in cols
                    ],
                })
        log.info("[schema] %s: %d table(s)", self.dbname, len(tables))
        return {"tables": tables}

    def list_tables(self, schemas: Optional[List[str]] = None) -> List[str]:
        ext = self.extractor_factory({"dbname": self.dbname})
        with ext:
            return [_display_name(t["schema"], t["table_name"]) for t in ext.list_tables(schemas=schemas)]
