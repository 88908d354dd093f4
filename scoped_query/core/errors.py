"""Error taxonomy of the query engine.

Every error is an ``HTTPException`` so routers can let it propagate and FastAPI
renders the status code directly. The engine itself never catches them.
"""

from __future__ import annotations

from fastapi import HTTPException


class QueryEngineError(HTTPException):
    status_code = 500
    default_detail = "Внутренняя ошибка"

    def __init__(self, detail: str | None = None, *, status_code: int | None = None):
        super().__init__(status_code=status_code or type(self).status_code, detail=detail or self.default_detail)


class ValidationError(QueryEngineError):
    status_code = 400
    default_detail = "Некорректный запрос"


class AuthenticationError(QueryEngineError):
    status_code = 401
    default_detail = "Требуется авторизация"


class AuthorizationError(QueryEngineError):
    status_code = 403
    default_detail = "Недостаточно прав"


class NotFoundError(QueryEngineError):
    status_code = 404
    default_detail = "Запись не найдена"


class ConflictError(QueryEngineError):
    status_code = 409
    default_detail = "Запись уже существует"


class ConfigurationError(QueryEngineError):
    status_code = 500
    default_detail = "Ресурс не зарегистрирован"


class MappingError(QueryEngineError):
    status_code = 500
    default_detail = "Строка хранилища не соответствует публичной схеме"


class DependencyError(QueryEngineError):
    status_code = 502
    default_detail = "Хранилище недоступно"

    @classmethod
    def timeout(cls, detail: str = "Превышено время ожидания хранилища") -> "DependencyError":
        return cls(detail, status_code=504)
