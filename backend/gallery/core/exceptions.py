# gallery/core/exceptions.py
from fastapi import status


class AppException(Exception):
    """Базовое исключение для приложения"""
    def __init__(self, status_code: int, detail: str, headers: dict[str, str] | None = None):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.headers = headers

class AuthenticationError(AppException):
    """Ошибка аутентификации: нет токена, он подделан или истёк"""
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class AuthorizationError(AppException):
    """Ошибка авторизации"""
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)

class ValidationError(AppException):
    """Ошибка валидации данных"""
    def __init__(self, detail: str = "Validation error"):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)

class ConflictError(AppException):
    """Нарушение уникальности"""
    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status.HTTP_409_CONFLICT, detail)

class NotFoundError(AppException):
    """Ресурс не найден"""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)

class DatabaseError(AppException):
    """Ошибка базы данных"""
    def __init__(self, detail: str = "Database error"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)


class DuplicateEmailError(Exception):
    """Хранилище аккаунтов отклонило запись из-за уникального индекса на email"""
    def __init__(self, email: str):
        super().__init__(f"User with email '{email}' already exists")
        self.email = email
