from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, TypedDict


# ---- нормализованные структуры метаданных

class TableInfo(TypedDict):
    schema: str           # схема таблицы
    table_name: str       # имя таблицы
    table_type: str       # 'BASE TABLE', 'VIEW' и т.п.


class ColumnInfo(TypedDict, total=False):
    name: str             # имя колонки
    data_type: str        # тип как его печатает СУБД: "integer", "character varying(50)"
    is_nullable: bool
    ordinal_position: int


class BaseExtractor(ABC):
    """
    Извлечение метаданных таблиц для конструктора DELETE.
    Реализации возвращают структуры, не зависящие от СУБД.
    """

    def __init__(self, conn_params: Dict[str, Any]):
        # для PostgreSQL достаточно {'dbname': ...}, остальное в BASE_DSN
        self.conn_params = conn_params

    def connect(self) -> None:
        raise NotImplementedError("connect(): необязательный метод, переопределите при необходимости.")

    def close(self) -> None:
        raise NotImplementedError("close(): необязательный метод, переопределите при необходимости.")

    def __enter__(self) -> "BaseExtractor":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.close()
        except NotImplementedError:
            pass

    @abstractmethod
    def list_tables(
        self,
        *,
        schemas: Optional[List[str]] = None,
        include_views: bool = False,
    ) -> List[TableInfo]:
        """
        Таблицы пользовательских схем. Представления из DELETE обычно не нужны,
        поэтому по умолчанию не возвращаются.
        """

    @abstractmethod
    def list_columns(self, table_schema: str, table_name: str) -> List[ColumnInfo]:
        """Колонки таблицы в порядке объявления."""

    def iter_tables_with_columns(
        self,
        *,
        schemas: Optional[List[str]] = None,
    ) -> Iterable[tuple[TableInfo, List[ColumnInfo]]]:
        for t in self.list_tables(schemas=schemas):
            yield t, self.list_columns(t["schema"], t["table_name"])
