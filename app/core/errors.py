from typing import Any, Dict, Optional


class DocumentServiceError(Exception):
    """Базовая ошибка домена, преобразуется в JSON-ответ на границе API"""

    status_code = 500
    code = "error"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, **extras: Any):
        self.message = message or self.default_message
        self.extras = extras
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message, "code": self.code}
        body.update(self.extras)
        return body


class UnauthorizedError(DocumentServiceError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class ForbiddenError(DocumentServiceError):
    status_code = 403
    code = "forbidden"
    default_message = "You don't have permission to access this document"


class NotFoundError(DocumentServiceError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class ValidationFailedError(DocumentServiceError):
    status_code = 400
    code = "validation_failed"
    default_message = "Invalid request"


class ShareExpiredError(DocumentServiceError):
    status_code = 410
    code = "share_expired"
    default_message = "Share has expired"


class PasswordRequiredError(DocumentServiceError):
    """Пароль не передан или неверен; клиент должен запросить пароль"""

    status_code = 401
    code = "password_required"
    default_message = "Password required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, requires_password=True)


class ConcurrentWriteConflictError(DocumentServiceError):
    """Гонка при назначении номера версии"""

    status_code = 500
    code = "concurrent_write_conflict"
    default_message = "Document was modified concurrently, please retry"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, retryable=True)
