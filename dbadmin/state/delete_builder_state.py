import logging
from typing import Callable, Optional

log = logging.getLogger(__name__)

OPERATORS = ["=", "!=", ">", "<", ">=", "<=", "LIKE", "IN", "IS NULL", "IS NOT NULL"]
NULL_OPERATORS = ("IS NULL", "IS NOT NULL")
CONNECTORS = ["AND", "OR"]
CONDITION_FIELDS = ("column", "operator", "value", "connector")

# подстроки имени типа, при которых литерал пишем без кавычек
NUMERIC_TYPE_MARKERS = ("int", "decimal", "float", "double")

PLACEHOLDER_SQL = "-- Select a table to generate DELETE statement"


class DeleteBuilderState:
    """
    Состояние конструктора DELETE для одной таблицы.

    schema: снимок схемы {"tables": [{"name": ..., "columns": [{"name", "data_type"}]}]},
    читается только при выборе таблицы.
    on_sql_change(sql) вызывается ровно один раз на каждую мутацию,
    on_warning(text): для предупреждений оператору (нет таблицы и т.п.).

    Кавычки подбираются эвристически по имени типа колонки, значения
    не экранируются: это инструмент оператора, а не приём пользовательского ввода.
    """

    def __init__(
        self,
        schema: Optional[dict] = None,
        on_sql_change: Optional[Callable[[str], None]] = None,
        on_warning: Optional[Callable[[str], None]] = None,
    ):
        self.schema = schema
        self.on_sql_change = on_sql_change
        self.on_warning = on_warning
        self.table: Optional[str] = None
        self.conditions: list[dict] = []  # [{"column", "operator", "value", "connector"}]
        self.columns: list[dict] = []     # [{"name", "data_type"}] активной таблицы

    # --- schema ---

    def update_schema(self, schema: Optional[dict]) -> None:
        """Новый снимок схемы; текущий выбор таблицы не трогаем."""
        self.schema = schema

    def table_names(self) -> list[str]:
        if not self.schema:
            return []
        return [t["name"] for t in self.schema.get("tables", [])]

    def _lookup_columns(self, table_name: str) -> list[dict]:
        for t in (self.schema or {}).get("tables", []):
            if t.get("name") == table_name:
                return list(t.get("columns") or [])
        log.debug("[delete] table %r not in schema snapshot", table_name)
        return []

    # --- mutations ---

    def select_table(self, table_name: Optional[str]) -> None:
        self.table = table_name or None
        self.conditions = []
        self.columns = self._lookup_columns(self.table) if self.table else []
        self._notify()

    def add_condition(self) -> Optional[int]:
        if not self.table:
            msg = "Please select a table first"
            log.warning("[delete] %s", msg)
            if callable(self.on_warning):
                self.on_warning(msg)
            return None

        self.conditions.append({
            "column": "",
            "operator": "=",
            "value": "",
            "connector": "AND",
        })
        self._notify()
        return len(self.conditions) - 1

    def remove_condition(self, index: int) -> None:
        # индекс приходит из отрисованного списка; устаревший просто игнорируем
        if 0 <= index < len(self.conditions):
            del self.conditions[index]
        self._notify()

    def update_condition(self, index: int, field: str, value: str) -> None:
        if 0 <= index < len(self.conditions) and field in CONDITION_FIELDS:
            self.conditions[index][field] = value
        self._notify()

    def clear(self) -> None:
        self.table = None
        self.conditions = []
        self.columns = []
        self._notify()

    # --- SQL ---

    def _valid_conditions(self) -> list[dict]:
        return [c for c in self.conditions if c.get("column")]

    def _is_numeric(self, column: str) -> bool:
        col = next((c for c in self.columns if c.get("name") == column), None)
        type_name = ((col or {}).get("data_type") or "").lower()
        return any(m in type_name for m in NUMERIC_TYPE_MARKERS)

    def _literal(self, column: str, value: str) -> str:
        value = value or ""
        if self._is_numeric(column):
            return value
        # без экранирования: O'Brien -> 'O'Brien'
        return f"'{value}'"

    def _render_term(self, cond: dict) -> str:
        col, op = cond["column"], cond.get("operator") or "="
        if op in NULL_OPERATORS:
            return f"{col} {op}"
        if op == "IN":
            return f"{col} IN ({cond.get('value') or ''})"
        return f"{col} {op} {self._literal(col, cond.get('value'))}"

    def build_sql(self) -> str:
        if not self.table:
            return PLACEHOLDER_SQL

        sql = f"DELETE FROM {self.table}"

        valid = self._valid_conditions()
        if valid:
            sql += "\nWHERE "
            for i, cond in enumerate(valid):
                if i > 0:
                    sql += f" {cond.get('connector') or 'AND'} "
                sql += self._render_term(cond)

        return sql + ";"

    def _notify(self) -> None:
        cb = self.on_sql_change
        if callable(cb):
            cb(self.build_sql())

    # --- read-only accessors ---

    def get_sql(self) -> str:
        return self.build_sql()

    def get_data(self) -> dict:
        return {
            "table": self.table,
            "conditions": [dict(c) for c in self.conditions],
        }

    def has_no_where_clause(self) -> bool:
        return not self._valid_conditions()

    def get_table_name(self) -> Optional[str]:
        return self.table
