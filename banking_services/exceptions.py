"""Error hierarchy for the banking services.

Every error carries the HTTP-style status code the API answers with and a
human readable message.
"""

from http import HTTPStatus


class BankingError(Exception):
    """Base exception for all banking service errors."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = HTTPStatus(status_code)

    def to_dict(self) -> dict:
        return {"status": int(self.status_code), "message": self.message}


class NotFoundError(BankingError):
    """Raised when a referenced entity does not exist."""

    status_code = HTTPStatus.NOT_FOUND


class BadRequestError(BankingError):
    """Raised when a request is missing data or breaks a business rule."""

    status_code = HTTPStatus.BAD_REQUEST


class InsufficientFundsError(BadRequestError):
    """Raised when a movement would leave the account below zero."""


class ServiceUnavailableError(BankingError):
    """Raised when a collaborating service cannot be reached."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE
