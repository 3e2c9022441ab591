import logging
from typing import Callable

from dbadmin.repositories.user_repository import UserRepository
from dbadmin.state.confirm_state import ConfirmRequest

log = logging.getLogger(__name__)


class UserService:
    """Операции над учётными записями; удаление: только после ввода имени пользователя."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo
        self.on_changed = None

    @staticmethod
    def delete_confirmation(username: str) -> ConfirmRequest:
        return ConfirmRequest(
            title="Delete User",
            message=f'This will permanently delete user "{username}"',
            details="All privileges and memberships of this role will be revoked.",
            confirm_word=username,
            confirm_button_text="Delete User",
        )

    def delete_user(self, username: str, confirm: Callable[[ConfirmRequest], bool]) -> bool:
        """
        True: пользователь удалён, False: оператор отменил.
        Ошибки репозитория (ValueError, SQLAlchemyError, psycopg2.Error) пробрасываются в UI.
        """
        if not confirm(self.delete_confirmation(username)):
            log.info("[users] delete of %s cancelled", username)
            return False

        self.user_repo.delete_user(username)
        self._changed()
        return True

    def set_locked(self, username: str, locked: bool) -> None:
        if locked:
            self.user_repo.lock_user(username)
        else:
            self.user_repo.unlock_user(username)
        self._changed()

    def create_user(self, username: str, password: str, password_confirm: str) -> None:
        if password != password_confirm:
            raise ValueError("Passwords do not match")
        self.user_repo.create_user(username, password)
        self._changed()

    def change_password(self, username: str, password: str, password_confirm: str) -> None:
        if not password:
            raise ValueError("Password is required")
        if password != password_confirm:
            raise ValueError("Passwords do not match")
        self.user_repo.change_password(username, password)

    def _changed(self) -> None:
        cb = self.on_changed
        if callable(cb):
            cb()
