"""Error taxonomy shared by the services and the HTTP layer.

Every handled failure carries a machine-readable ``code`` and the HTTP status
the API answers with; ``main.py`` renders them into the error envelope.
"""

from fastapi import status


class BookingAPIError(Exception):
    code = "INTERNAL_SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(BookingAPIError):
    """A required input is missing or malformed."""

    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidDateError(BookingAPIError):
    """The date parses (or fails to) but cannot be booked."""

    code = "INVALID_DATE"
    status_code = status.HTTP_400_BAD_REQUEST


class SlotUnavailableError(BookingAPIError):
    code = "SLOT_UNAVAILABLE"
    status_code = status.HTTP_409_CONFLICT


class ServiceUnavailableError(BookingAPIError):
    code = "SERVICE_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
