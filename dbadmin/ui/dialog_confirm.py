import tkinter as tk
from tkinter import ttk

from dbadmin.state.confirm_state import ConfirmRequest, TypeToConfirmState


class TypeToConfirmDialog(tk.Toplevel):
    """
    Модальное окно «введите слово для подтверждения».
    Создаётся один раз на приложение и переиспользуется всеми опасными операциями.

        ok = dialog.show(title=..., message=..., confirm_word="users")

    show() ждёт через wait_variable: вызывающий код стоит, mainloop продолжает
    обрабатывать ввод.
    """

    def __init__(self, master: tk.Misc):
        super().__init__(master)
        self.withdraw()
        self.transient(master)
        self.resizable(False, False)

        self.model = TypeToConfirmState()
        self._result = tk.BooleanVar(value=False)
        self._done = tk.IntVar(value=0)

        self.var_title = tk.StringVar()
        self.var_message = tk.StringVar()
        self.var_details = tk.StringVar()
        self.var_prompt = tk.StringVar()
        self.var_input = tk.StringVar()

        body = ttk.Frame(self, padding=16)
        body.pack(fill="both", expand=True)

        ttk.Label(body, textvariable=self.var_title, font=("TkDefaultFont", 11, "bold")).pack(anchor="w")
        ttk.Label(body, textvariable=self.var_message, wraplength=380).pack(anchor="w", pady=(10, 2))
        ttk.Label(body, textvariable=self.var_details, wraplength=380, foreground="#666").pack(anchor="w")

        ttk.Label(body, textvariable=self.var_prompt).pack(anchor="w", pady=(12, 2))
        self.ent = ttk.Entry(body, textvariable=self.var_input, width=40)
        self.ent.pack(fill="x")

        btns = ttk.Frame(body)
        btns.pack(fill="x", pady=(14, 0))
        self.btn_confirm = ttk.Button(btns, text="Delete", command=self._on_confirm, state="disabled")
        self.btn_confirm.pack(side="right")
        ttk.Button(btns, text="Cancel", command=self._on_cancel).pack(side="right", padx=6)

        # каждое изменение поля: пересчёт доступности кнопки
        self.var_input.trace_add("write", lambda *_: self._on_input())
        self.ent.bind("<Return>", lambda e: self._on_confirm())
        self.bind("<Escape>", lambda e: self._on_cancel())
        # крестик окна = клик по фону в вебе
        self.protocol("WM_DELETE_WINDOW", self._on_cancel)

    # --- public ---

    def show(self, request: ConfirmRequest = None, **options) -> bool:
        self.model.request(request or options, self._settled)
        req = self.model.current

        self.title(req.title)
        self.var_title.set(req.title)
        self.var_message.set(req.message)
        self.var_details.set(req.details)
        self.var_prompt.set(f"Type {req.confirm_word} to confirm:")
        self.btn_confirm.configure(text=req.confirm_button_text)
        self.var_input.set("")
        self._sync_button()

        self.deiconify()
        self.grab_set()
        self.ent.focus_set()

        self.wait_variable(self._done)
        return self._result.get()

    __call__ = show

    # --- internal ---

    def _settled(self, result: bool) -> None:
        self.grab_release()
        self.withdraw()
        self._result.set(result)
        self._done.set(self._done.get() + 1)

    def _sync_button(self) -> None:
        self.btn_confirm.configure(state="normal" if self.model.can_confirm else "disabled")

    def _on_input(self) -> None:
        self.model.set_input(self.var_input.get())
        self._sync_button()

    def _on_confirm(self) -> None:
        self.model.confirm()

    def _on_cancel(self) -> None:
        self.model.cancel()
