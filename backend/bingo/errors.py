class BingoError(Exception):
    """Base class for failures reported back to the requester only."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'success': False, 'error': self.message}


class ValidationError(BingoError):
    status_code = 400


class AuthorizationError(BingoError):
    status_code = 403


class NotFoundError(BingoError):
    status_code = 404


class InvalidStateError(BingoError):
    status_code = 409


class ServiceRejected(BingoError):
    """The data service answered with ``success: false``."""

    status_code = 400


class ServiceUnavailable(BingoError):
    status_code = 502


class ServiceTimeout(ServiceUnavailable):
    status_code = 504
