"""Exception hierarchy for barry."""


class BarryError(Exception):
    """Base exception for all barry errors."""


class ConfigurationError(BarryError):
    """Raised when configuration is invalid or missing."""


class InvalidDateError(BarryError):
    """Raised when a date argument is not in YYYY-MM-DD format."""


class MercuryAPIError(BarryError):
    """Base exception for failures talking to the Mercury API."""


class MercuryRequestError(MercuryAPIError):
    """Raised when a request cannot be built or the transport fails."""


class MercuryStatusError(MercuryAPIError):
    """Raised when the API answers with anything other than 200."""

    def __init__(self, message: str, status: int, reason: str = ""):
        super().__init__(message)
        self.status = status
        self.reason = reason


class MercuryDecodeError(MercuryAPIError):
    """Raised when a response body cannot be decoded."""
