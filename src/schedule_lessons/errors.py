from typing import Optional


class LessonsError(Exception):
    """Базовая ошибка сервиса занятий."""


class ValidationError(LessonsError):
    """Поле запроса отсутствует, вне диапазона или некорректно."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class ParseError(ValidationError):
    """Не удалось разобрать компактную строковую запись (первый этап нормализации)."""


class MediaTypeError(LessonsError):
    def __init__(self, content_type: Optional[str]):
        super().__init__(f"unsupported content type: {content_type or '<none>'}")
        self.content_type = content_type


class WriteError(LessonsError):
    """Транзакция создания занятий не была зафиксирована."""

    def __init__(self, message: str, conflict: bool = False):
        super().__init__(message)
        self.conflict = conflict


class QueryError(LessonsError):
    """Выборка занятий не может быть выполнена."""


class RequestCancelled(LessonsError):
    """Клиент отключился до фиксации транзакции."""
