import logging
from dataclasses import dataclass, fields
from typing import Callable, Optional

log = logging.getLogger(__name__)

# camelCase-ключи, как их передают старые вызовы
_OPTION_ALIASES = {
    "confirmWord": "confirm_word",
    "confirmButtonText": "confirm_button_text",
}


@dataclass(frozen=True)
class ConfirmRequest:
    title: str = "Confirm Action"
    message: str = "This action cannot be undone."
    details: str = ""
    confirm_word: str = "DELETE"
    confirm_button_text: str = "Delete"

    @classmethod
    def from_options(cls, **options) -> "ConfirmRequest":
        """
        Собирает запрос из опций вызывающего кода.
        Пустые значения заменяются значениями по умолчанию, лишние ключи игнорируются.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            key = _OPTION_ALIASES.get(key, key)
            if key in known and value:
                kwargs[key] = str(value)
        return cls(**kwargs)


class TypeToConfirmState:
    """
    Модель диалога «введите слово, чтобы подтвердить».

    Один ожидающий запрос за раз: request() кладёт продолжение в слот,
    терминальные действия (confirm/cancel) вызывают settle(), который
    резолвит продолжение и очищает слот. Таймаута нет.
    """

    def __init__(self):
        self.current: Optional[ConfirmRequest] = None
        self.typed = ""
        self.can_confirm = False
        self._on_settled: Optional[Callable[[bool], None]] = None

    @property
    def is_pending(self) -> bool:
        return self._on_settled is not None

    def request(self, options, on_settled: Callable[[bool], None]) -> ConfirmRequest:
        if not isinstance(options, ConfirmRequest):
            options = ConfirmRequest.from_options(**(options or {}))

        if self.is_pending:
            log.warning("[confirm] new request while %r is pending; cancelling it", self.current.title)
            self.settle(False)

        # ничего не должно остаться от предыдущего вызова
        self.current = options
        self.typed = ""
        self.can_confirm = False
        self._on_settled = on_settled
        log.debug("[confirm] pending: %s", options.title)
        return options

    def set_input(self, text: str) -> bool:
        self.typed = text or ""
        self.can_confirm = (
            self.current is not None and self.typed == self.current.confirm_word
        )
        return self.can_confirm

    def confirm(self) -> bool:
        """Подтверждение срабатывает только при точном совпадении слова."""
        if not (self.is_pending and self.can_confirm):
            return False
        self.settle(True)
        return True

    # Enter в поле ввода
    submit = confirm

    def cancel(self) -> None:
        self.settle(False)

    def settle(self, result: bool) -> None:
        cb, self._on_settled = self._on_settled, None
        if cb is None:
            return
        log.info("[confirm] %s -> %s", self.current.title if self.current else "?", bool(result))
        cb(bool(result))
