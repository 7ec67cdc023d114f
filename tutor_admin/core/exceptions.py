"""
Error taxonomy for administrative actions.

Every failure raised by the store, the handlers or the dispatcher is an
ActionError. The dispatcher stamps the operation name on the error before
it reaches the caller, so str(error) reads "<operation>: <message>".

    ActionError
    ├── UnknownOperation   name not in the catalog (never reaches a handler)
    ├── InvalidArguments   missing / mistyped / out-of-enum parameter
    ├── NotFound           user or settings singleton absent at read time
    ├── StoreError         the underlying store call failed
    ├── AiDisabled         AI features switched off in system settings
    └── QuotaExceeded      daily AI query limit reached
"""

from typing import Optional


class ActionError(Exception):
    """Base class for all action failures."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "operation": self.operation,
            "message": self.message,
        }


class UnknownOperation(ActionError):
    pass


class InvalidArguments(ActionError):
    pass


class NotFound(ActionError):
    pass


class StoreError(ActionError):
    pass


class AiDisabled(ActionError):
    pass


class QuotaExceeded(ActionError):
    def __init__(self, message: str, limit: int, operation: Optional[str] = None):
        super().__init__(message, operation)
        self.limit = limit
