import logging
import time
from typing import Callable, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.engine import Engine

from dbadmin.db.connections import get_engine
from dbadmin.state.confirm_state import ConfirmRequest
from dbadmin.state.delete_builder_state import NULL_OPERATORS, OPERATORS, DeleteBuilderState

log = logging.getLogger(__name__)

FK_VIOLATION_MESSAGE = (
    "Cannot delete: This record is referenced by other records (foreign key constraint)"
)

SAMPLE_LIMIT = 10


def bind_where(builder: DeleteBuilderState, quote: Callable[[str], str]) -> tuple[str, dict]:
    """
    WHERE-часть для выполнения: те же условия, что в превью builder.build_sql(),
    но значения уходят bind-параметрами :p0, :p1, ... (IN: по параметру на элемент).
    Возвращает ("", {}) если условий нет. Неизвестная колонка/оператор -> ValueError.
    """
    known = {c.get("name") for c in builder.columns}
    terms, params = [], {}

    def bind(value) -> str:
        key = f"p{len(params)}"
        params[key] = value
        return f":{key}"

    conditions = [c for c in builder.get_data()["conditions"] if c.get("column")]
    for i, cond in enumerate(conditions):
        col, op = cond["column"], cond.get("operator") or "="
        if col not in known:
            raise ValueError(f"Unknown column '{col}' in condition")
        if op not in OPERATORS:
            raise ValueError(f"Invalid operator '{op}'")

        if i > 0:
            terms.append(cond.get("connector") or "AND")

        if op in NULL_OPERATORS:
            terms.append(f"{quote(col)} {op}")
        elif op == "IN":
            items = [v.strip() for v in (cond.get("value") or "").split(",")]
            terms.append(f"{quote(col)} IN ({', '.join(bind(v) for v in items)})")
        else:
            terms.append(f"{quote(col)} {op} {bind(cond.get('value') or '')}")

    if not terms:
        return "", {}
    return " WHERE " + " ".join(terms), params


class DeleteService:
    """
    Выполнение DELETE, собранного DeleteBuilderState.
    Опасные запросы (без WHERE) проходят через confirm(ConfirmRequest) -> bool.
    Текст build_sql() только для показа; в базу уходит запрос с bind-параметрами.
    """

    def __init__(self, engine_factory: Callable[[str], Engine] = get_engine):
        self.engine_factory = engine_factory

    def _compile(self, engine: Engine, builder: DeleteBuilderState) -> tuple[str, str, dict]:
        """(имя таблицы в кавычках, WHERE-часть, параметры)"""
        preparer = engine.dialect.identifier_preparer
        quote = preparer.quote_identifier
        # "schema.table" для таблиц вне public
        table = ".".join(quote(part) for part in builder.get_table_name().split("."))
        where, params = bind_where(builder, quote)
        return table, where, params

    def run(self, dbname: str, sql: str, params: Optional[dict] = None) -> dict:
        engine = self.engine_factory(dbname)
        t0 = time.perf_counter()
        ok, affected, err = True, 0, None
        try:
            with engine.begin() as conn:
                res = conn.execute(text(sql), params or {})
                affected = res.rowcount
        except IntegrityError as e:
            log.error("[delete] integrity error in %s: %s", dbname, e.orig)
            ok, err = False, FK_VIOLATION_MESSAGE
        except SQLAlchemyError as e:
            log.error("[delete] %s failed: %s", dbname, e)
            ok, err = False, f"Database error: {getattr(e, 'orig', None) or e}"
        dt = round((time.perf_counter() - t0) * 1000)

        if ok:
            log.info("[delete] %s: %d row(s) in %d ms", dbname, affected, dt)

        return {"ok": ok, "affected_rows": affected, "duration_ms": dt, "error": err, "sql": sql}

    def preview(self, dbname: str, builder: DeleteBuilderState) -> dict:
        """
        Что удалит запрос, без выполнения DELETE:
        affected_count, до SAMPLE_LIMIT строк в sample_rows, has_where_clause.
        """
        result = {
            "ok": False,
            "affected_count": 0,
            "sample_rows": [],
            "has_where_clause": not builder.has_no_where_clause(),
            "error": None,
            "sql": builder.get_sql(),
        }
        if not builder.get_table_name():
            result["error"] = "Select a table first"
            return result

        engine = self.engine_factory(dbname)
        try:
            table, where, params = self._compile(engine, builder)
            with engine.connect() as conn:
                count = conn.execute(text(f"SELECT COUNT(*) FROM {table}{where}"), params).scalar_one()
                rows = conn.execute(
                    text(f"SELECT * FROM {table}{where} LIMIT {SAMPLE_LIMIT}"), params
                ).mappings().all()
        except ValueError as e:
            result["error"] = str(e)
            return result
        except SQLAlchemyError as e:
            log.error("[delete] preview in %s failed: %s", dbname, e)
            result["error"] = f"Database error: {getattr(e, 'orig', None) or e}"
            return result

        result.update(ok=True, affected_count=int(count), sample_rows=[dict(r) for r in rows])
        log.debug("[delete] preview %s: %d row(s)", dbname, result["affected_count"])
        return result

    @staticmethod
    def confirmation_for(
        builder: DeleteBuilderState,
        affected_count: Optional[int] = None,
    ) -> Optional[ConfirmRequest]:
        """Запрос подтверждения для запроса без WHERE; None: подтверждение не нужно."""
        table = builder.get_table_name()
        if not table or not builder.has_no_where_clause():
            return None
        details = "The statement has no WHERE clause."
        if affected_count is not None:
            details = f"{affected_count} row(s) will be deleted. {details}"
        return ConfirmRequest(
            title="Delete All Rows",
            message=f'This will DELETE ALL rows from "{table}"',
            details=details,
            confirm_word=table,
            confirm_button_text="Delete All",
        )

    def execute(
        self,
        dbname: str,
        builder: DeleteBuilderState,
        confirm: Callable[[ConfirmRequest], bool],
    ) -> dict:
        sql = builder.get_sql()
        if not builder.get_table_name():
            return {"ok": False, "cancelled": False, "affected_rows": 0,
                    "duration_ms": 0, "error": "Select a table first", "sql": sql}

        if builder.has_no_where_clause():
            pv = self.preview(dbname, builder)
            req = self.confirmation_for(builder, pv["affected_count"] if pv["ok"] else None)
            if not confirm(req):
                log.info("[delete] cancelled: %s", sql.replace("\n", " "))
                return {"ok": False, "cancelled": True, "affected_rows": 0,
                        "duration_ms": 0, "error": None, "sql": sql}

        try:
            table, where, params = self._compile(self.engine_factory(dbname), builder)
        except ValueError as e:
            return {"ok": False, "cancelled": False, "affected_rows": 0,
                    "duration_ms": 0, "error": str(e), "sql": sql}

        result = self.run(dbname, f"DELETE FROM {table}{where}", params)
        # оператору показываем тот текст, который он видел в превью
        result["sql"] = sql
        result["cancelled"] = False
        return result
