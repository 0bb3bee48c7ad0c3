from typing import Optional

from fastapi import status

from schooldesk.core.enums import DenyReason


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class ConflictError(ServiceError):
    """Uniqueness violation detected before insert; reported as a 400 like other bad input."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class UnauthenticatedError(ServiceError):
    def __init__(self, message: str = "Could not validate credentials") -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


_DENY_MESSAGES = {
    DenyReason.CROSS_TENANT: "Access denied: resource belongs to another school",
    DenyReason.NOT_OWNER: "Access denied: you can only access your own records",
    DenyReason.INSUFFICIENT_ROLE: "Access denied: your role cannot perform this action",
}


class ForbiddenError(ServiceError):
    """Policy denial. The reason is kept for logging and clients; the wire carries only the message."""

    def __init__(self, reason: DenyReason, message: Optional[str] = None) -> None:
        super().__init__(message or _DENY_MESSAGES[reason], status.HTTP_403_FORBIDDEN)
        self.reason = reason
