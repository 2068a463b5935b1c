from typing import Optional


class RelayError(Exception):
    """Error that maps onto an HTTP status and a JSON `error` message."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ClientError(RelayError):
    """Bad input from the caller (4xx)."""

    status_code = 400


class ServerError(RelayError):
    """Provider, network or unexpected failure (500)."""

    status_code = 500
