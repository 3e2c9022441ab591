import tkinter as tk
from tkinter import ttk, messagebox, simpledialog
from typing import Callable, Dict, List, Optional

from dbadmin.repositories.user_repository import UserRepository
from dbadmin.services.user_service import UserService
from dbadmin.state.confirm_state import ConfirmRequest


class TabUsers(ttk.Frame):
    """
    Вкладка: учётные записи сервера
    - список ролей и детали выбранной
    - Create / Password / Lock / Unlock / Delete (удаление: через ввод имени)
    """

    def __init__(
        self,
        parent: ttk.Notebook,
        user_repo: UserRepository,
        user_service: UserService,
        confirm: Callable[[ConfirmRequest], bool],
    ):
        super().__init__(parent)
        self.user_repo = user_repo
        self.user_service = user_service
        self.confirm = confirm
        self._users: List[Dict] = []

        top = ttk.Frame(self)
        top.pack(fill="x", padx=10, pady=10)

        ttk.Label(top, text="Users:").pack(side="left")
        ttk.Button(top, text="Refresh", command=self.refresh_list).pack(side="right", padx=5)
        ttk.Button(top, text="Create user", command=self._create_user_dialog).pack(side="right", padx=5)

        pan = ttk.Panedwindow(self, orient="horizontal")
        pan.pack(fill="both", expand=True, padx=10, pady=(0, 10))

        left = ttk.Frame(pan)
        pan.add(left, weight=1)
        self.lst = tk.Listbox(left, height=14)
        self.lst.pack(fill="both", expand=True)
        self.lst.bind("<<ListboxSelect>>", lambda e: self._show_details())

        actions = ttk.Frame(left)
        actions.pack(fill="x", pady=(6, 0))
        ttk.Button(actions, text="Password", command=self._change_password_dialog).pack(side="left")
        ttk.Button(actions, text="Lock", command=lambda: self._set_locked(True)).pack(side="left", padx=4)
        ttk.Button(actions, text="Unlock", command=lambda: self._set_locked(False)).pack(side="left")
        ttk.Button(actions, text="Delete", command=self._delete_user).pack(side="left", padx=4)

        right = ttk.Labelframe(pan, text="Details")
        pan.add(right, weight=1)
        self.txt_details = tk.Text(right, height=14, state="disabled")
        self.txt_details.pack(fill="both", expand=True, padx=8, pady=8)

        self.user_service.on_changed = self.refresh_list

    # --- public ---

    def refresh_list(self):
        try:
            self._users = self.user_repo.list_users()
        except Exception as e:
            messagebox.showerror("Users", str(e))
            return
        self.lst.delete(0, "end")
        for u in self._users:
            flags = []
            if u.get("is_locked"):
                flags.append("locked")
            if u.get("is_superuser"):
                flags.append("superuser")
            suffix = f"  [{', '.join(flags)}]" if flags else ""
            self.lst.insert("end", f"{u['username']}{suffix}")
        self._set_details("Select a user to view details")

    # --- private ---

    def _selected(self) -> Optional[str]:
        sel = self.lst.curselection()
        if not sel:
            messagebox.showwarning("Select user", "Please select a user.")
            return None
        return self._users[sel[0]]["username"]

    def _set_details(self, content: str):
        self.txt_details.configure(state="normal")
        self.txt_details.delete("1.0", "end")
        self.txt_details.insert("1.0", content)
        self.txt_details.configure(state="disabled")

    def _show_details(self):
        sel = self.lst.curselection()
        if not sel:
            return
        username = self._users[sel[0]]["username"]
        try:
            d = self.user_repo.get_user_details(username)
        except Exception as e:
            self._set_details(f"Error: {e}")
            return
        limit = d.get("conn_limit")
        lines = [
            f"{d['username']}",
            "",
            f"Can login:   {'Yes' if d.get('can_login') else 'No'}",
            f"Superuser:   {'Yes' if d.get('is_superuser') else 'No'}",
            f"Valid until: {d.get('valid_until') or 'never expires'}",
            f"Conn. limit: {limit if limit is not None and limit >= 0 else 'Unlimited'}",
        ]
        if d.get("member_of"):
            lines += ["", "Member of:"] + [f"  {g}" for g in d["member_of"]]
        self._set_details("\n".join(lines))

    def _create_user_dialog(self):
        username = simpledialog.askstring("Create user", "Username:", parent=self)
        if not username:
            return
        password = simpledialog.askstring("Create user", "Password:", show="*", parent=self) or ""
        password_confirm = simpledialog.askstring("Create user", "Confirm password:", show="*", parent=self) or ""
        try:
            self.user_service.create_user(username.strip(), password, password_confirm)
            messagebox.showinfo("OK", f"User '{username}' created successfully")
        except Exception as e:
            messagebox.showerror("Error", str(e))

    def _change_password_dialog(self):
        username = self._selected()
        if not username:
            return
        password = simpledialog.askstring("Change password", f"New password for {username}:", show="*", parent=self)
        if password is None:
            return
        password_confirm = simpledialog.askstring("Change password", "Confirm password:", show="*", parent=self) or ""
        try:
            self.user_service.change_password(username, password, password_confirm)
            messagebox.showinfo("OK", "Password changed successfully")
        except Exception as e:
            messagebox.showerror("Error", str(e))

    def _set_locked(self, locked: bool):
        username = self._selected()
        if not username:
            return
        try:
            self.user_service.set_locked(username, locked)
        except Exception as e:
            messagebox.showerror("Error", str(e))

    def _delete_user(self):
        username = self._selected()
        if not username:
            return
        try:
            self.user_service.delete_user(username, self.confirm)
        except Exception as e:
            messagebox.showerror("Delete failed", str(e))
