"""Error taxonomy shared by the booking core and the HTTP layer."""


class BookingError(Exception):
    """Base error carrying the HTTP status and a stable code for callers."""

    status_code = 400
    code = "booking_error"
    default_message = "Booking request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(BookingError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class UnauthenticatedError(BookingError):
    status_code = 401
    code = "unauthenticated"
    default_message = "You must be logged in"


class InvalidCredentialsError(BookingError):
    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class DuplicateUserError(BookingError):
    status_code = 409
    code = "duplicate_user"
    default_message = "User already exists"


class InvalidSeatError(BookingError):
    status_code = 400
    code = "invalid_seat"
    default_message = "Seat number out of range"


class TripFullError(BookingError):
    status_code = 409
    code = "full"
    default_message = "Trip is fully booked"


class SeatConflictError(BookingError):
    status_code = 409
    code = "conflict"
    default_message = "Seat already reserved"


class LedgerTimeoutError(BookingError):
    """The seat ledger did not answer within the configured deadline."""

    status_code = 504
    code = "timeout"
    default_message = "Seat ledger timed out, try again later"


class StorageFailureError(BookingError):
    """Backing store unavailable. Server side, never retried by the core."""

    status_code = 503
    code = "storage_failure"
    default_message = "Storage unavailable, try again later"
