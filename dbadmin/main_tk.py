import logging
import os
import tkinter as tk
from tkinter import ttk

from dbadmin.db.connections import DEFAULT_DB, get_engine, startup_healthcheck
from dbadmin.repositories.schema_repository import SchemaRepository
from dbadmin.repositories.user_repository import UserRepository
from dbadmin.services.delete_service import DeleteService
from dbadmin.services.user_service import UserService

# вкладки
from dbadmin.ui.dialog_confirm import TypeToConfirmDialog
from dbadmin.ui.tab_delete import TabDelete
from dbadmin.ui.tab_users import TabUsers


class App(tk.Tk):
    def __init__(self, dbname: str):
        super().__init__()
        self.title(f"Mini DB Admin - {dbname}")
        self.geometry("960x640")

        # зависимости/сервисы
        self.dbname = dbname
        self.schema_repo = SchemaRepository(dbname)
        self.user_repo = UserRepository(dbname, engine=get_engine(dbname))
        self.delete_service = DeleteService()
        self.user_service = UserService(self.user_repo)

        # одно окно подтверждения на всё приложение
        self.confirm_dialog = TypeToConfirmDialog(self)

        self.nb = ttk.Notebook(self)
        self.nb.pack(fill="both", expand=True)

        self.tab_delete = TabDelete(
            parent=self.nb,
            dbname=dbname,
            schema_repo=self.schema_repo,
            delete_service=self.delete_service,
            confirm=self.confirm_dialog,
        )
        self.nb.add(self.tab_delete, text="Delete Builder")

        self.tab_users = TabUsers(
            parent=self.nb,
            user_repo=self.user_repo,
            user_service=self.user_service,
            confirm=self.confirm_dialog,
        )
        self.nb.add(self.tab_users, text="Users")

        self.tab_delete.refresh_schema()
        self.tab_users.refresh_list()
        self.nb.select(self.tab_delete)


def main():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    startup_healthcheck()
    app = App(DEFAULT_DB)
    app.mainloop()


if __name__ == "__main__":
    main()
