class TwitterError(Exception):
    """Failure of a call to the API: transport, HTTP status, or decoding."""

    def __init__(self, message: str, status: int | None = None, data: bytes | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.message} (HTTP {self.status})"
        return self.message


class InvalidQueryError(ValueError):
    """Raised when a query without any standalone term is about to be sent."""
