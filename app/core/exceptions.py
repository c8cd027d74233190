"""Application errors raised by services and mapped to HTTP responses."""


class DomainError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class InvalidInputError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 400)


class InvalidStateError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 400)


class CapacityExceededError(DomainError):
    def __init__(self, remaining: int):
        self.remaining = remaining
        super().__init__(f"Not enough spots available. Only {remaining} spots left.", 400)


class UnauthorizedError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 401)


class ForbiddenError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 403)


class NotFoundError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 404)


class BookingBusyError(DomainError):
    def __init__(self, message: str = "Could not acquire lock, please try again."):
        super().__init__(message, 503)
