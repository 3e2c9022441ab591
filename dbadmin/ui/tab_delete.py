import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable

from dbadmin.repositories.schema_repository import SchemaRepository
from dbadmin.services.delete_service import DeleteService
from dbadmin.state.confirm_state import ConfirmRequest
from dbadmin.state.delete_builder_state import (
    CONNECTORS,
    NULL_OPERATORS,
    OPERATORS,
    DeleteBuilderState,
)


class TabDelete(ttk.Frame):
    """
    Вкладка: конструктор DELETE
    - выбор таблицы
    - условия WHERE (AND / OR у каждой строки, кроме первой)
    - превью SQL
    - Execute (без WHERE: только через ввод имени таблицы)
    """

    def __init__(
      self,
      parent: ttk.Notebook,
      dbname: str,
      schema_repo: SchemaRepository,
      delete_service: DeleteService,
      confirm: Callable[[ConfirmRequest], bool],
    ):
        super().__init__(parent)
        self.dbname = dbname
        self.schema_repo = schema_repo
        self.delete_service = delete_service
        self.confirm = confirm

        self.builder = DeleteBuilderState(
            on_sql_change=self._on_sql_change,
            on_warning=lambda msg: messagebox.showwarning("Delete", msg),
        )

        # верхняя панель
        top = ttk.Frame(self)
        top.pack(fill="x", padx=10, pady=8)

        ttk.Label(top, text="Table:").pack(side="left")
        self.cmb_table = ttk.Combobox(top, values=[], state="readonly", width=32)
        self.cmb_table.pack(side="left", padx=6)
        self.cmb_table.bind("<<ComboboxSelected>>", self._on_table_change)

        ttk.Button(top, text="Refresh schema", command=self.refresh_schema).pack(side="right")

        # WHERE
        where = ttk.Labelframe(self, text="WHERE")
        where.pack(fill="both", expand=True, padx=10, pady=8)

        self.where_rows_container = ttk.Frame(where)
        self.where_rows_container.pack(fill="both", expand=True, padx=8, pady=8)

        where_btns = ttk.Frame(where)
        where_btns.pack(fill="x", padx=8, pady=(0, 8))
        ttk.Button(where_btns, text="+ Add condition", command=self._add_condition).pack(side="left")

        # SQL превью
        frm_sql = ttk.Frame(self)
        frm_sql.pack(fill="both", expand=True, padx=10, pady=8)
        self.txt_preview = tk.Text(frm_sql, height=6)
        self.txt_preview.pack(fill="both", expand=True)

        btns = ttk.Frame(self)
        btns.pack(fill="x", padx=10, pady=(0, 10))
        ttk.Button(btns, text="Execute", command=self._execute).pack(side="left")
        ttk.Button(btns, text="Clear", command=self._clear).pack(side="left", padx=6)

        self._on_sql_change(self.builder.build_sql())

    # --- public ---

    def refresh_schema(self):
        try:
            self.builder.update_schema(self.schema_repo.snapshot())
        except Exception as e:
            messagebox.showerror("Schema error", str(e))
            return
        cur = self.cmb_table.get()
        self.cmb_table["values"] = self.builder.table_names()
        if cur and cur not in self.cmb_table["values"]:
            self._clear()

    # --- internal ---

    def _on_sql_change(self, sql: str):
        self.txt_preview.delete("1.0", "end")
        self.txt_preview.insert("1.0", sql)

    def _on_table_change(self, _evt=None):
        self.builder.select_table(self.cmb_table.get())
        self._render_conditions()

    def _add_condition(self):
        if self.builder.add_condition() is not None:
            self._render_conditions()

    def _remove_condition(self, index: int):
        self.builder.remove_condition(index)
        self._render_conditions()

    def _clear(self):
        self.cmb_table.set("")
        self.builder.clear()
        self._render_conditions()

    def _render_conditions(self):
        for w in self.where_rows_container.winfo_children():
            w.destroy()

        data = self.builder.get_data()
        if not data["table"]:
            return

        if self.builder.has_no_where_clause():
            ttk.Label(
                self.where_rows_container,
                text="No WHERE clause - this will DELETE ALL rows! Type-to-confirm required.",
                foreground="#b00020",
            ).pack(fill="x", pady=(0, 6))

        col_names = [c["name"] for c in self.builder.columns]
        for index, cond in enumerate(data["conditions"]):
            self._render_condition_row(index, cond, col_names)

    def _render_condition_row(self, index: int, cond: dict, col_names: list[str]):
        row = ttk.Frame(self.where_rows_container)
        row.pack(fill="x", pady=2)

        if index > 0:
            cmb_conn = ttk.Combobox(row, values=CONNECTORS, state="readonly", width=5)
            cmb_conn.set(cond["connector"])
            cmb_conn.pack(side="left", padx=(0, 4))
            cmb_conn.bind("<<ComboboxSelected>>",
                          lambda e, w=cmb_conn: self._update(index, "connector", w.get()))

        cmb_col = ttk.Combobox(row, values=col_names, state="readonly", width=18)
        cmb_col.set(cond["column"])
        cmb_col.pack(side="left")
        cmb_col.bind("<<ComboboxSelected>>",
                     lambda e, w=cmb_col: self._update(index, "column", w.get()))

        cmb_op = ttk.Combobox(row, values=OPERATORS, state="readonly", width=11)
        cmb_op.set(cond["operator"])
        cmb_op.pack(side="left", padx=4)

        var_val = tk.StringVar(value=cond["value"])
        ent_val = ttk.Entry(row, width=22, textvariable=var_val)
        ent_val.pack(side="left", padx=4)
        if cond["operator"] in NULL_OPERATORS:
            ent_val.configure(state="disabled")

        def on_op_change(_evt=None):
            op = cmb_op.get()
            ent_val.configure(state="disabled" if op in NULL_OPERATORS else "normal")
            self._update(index, "operator", op)

        cmb_op.bind("<<ComboboxSelected>>", on_op_change)
        # превью «на лету» при наборе значения
        var_val.trace_add("write", lambda *_: self._update(index, "value", var_val.get()))

        ttk.Button(row, text="×", width=3,
                   command=lambda: self._remove_condition(index)).pack(side="left", padx=4)

    def _update(self, index: int, field: str, value: str):
        was_empty = self.builder.has_no_where_clause()
        self.builder.update_condition(index, field, value)
        # предупреждение о DELETE без WHERE появилось/исчезло: перерисуем
        if field == "column" and was_empty != self.builder.has_no_where_clause():
            self._render_conditions()

    def _execute(self):
        if not self.builder.get_table_name():
            messagebox.showwarning("Delete", "Please select a table first")
            return

        if not self.builder.has_no_where_clause():
            pv = self.delete_service.preview(self.dbname, self.builder)
            if not pv["ok"]:
                messagebox.showerror("Delete failed", pv["error"] or "Unknown error")
                return
            prompt = f"Rows to delete: {pv['affected_count']}\n\n{self.builder.get_sql()}\n\nExecute?"
            if not messagebox.askyesno("Delete", prompt):
                return

        res = self.delete_service.execute(self.dbname, self.builder, self.confirm)
        if res.get("cancelled"):
            return
        if not res.get("ok"):
            messagebox.showerror("Delete failed", res.get("error") or "Unknown error")
            return
        messagebox.showinfo(
            "Deleted",
            f"Rows affected: {res.get('affected_rows', 0)}, duration: {res.get('duration_ms', 0)} ms",
        )
