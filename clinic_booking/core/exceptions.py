"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    error_code = "InternalServerError"

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    error_code = "NotFoundError"

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    error_code = "Unauthorized"

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ValidationException(AppException):
    """Missing or malformed input."""

    error_code = "ValidationError"

    def __init__(self, message: str = "Validation error"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class PastDateException(AppException):
    """Requested date precedes today in the reference timezone."""

    error_code = "PastDateError"

    def __init__(self, message: str = "Cannot book appointments for past dates."):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class SlotNotOfferedException(AppException):
    """Requested time is not an offered slot for the date and consultation type."""

    error_code = "SlotNotOfferedError"

    def __init__(self, message: str = "This time slot is not offered by the doctor."):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class AlreadyBookedException(AppException):
    """Another booking holds the slot."""

    error_code = "AlreadyBookedError"

    def __init__(self, message: str = "This slot is already booked. Please choose another time."):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class UnsupportedOperationException(AppException):
    """Operation is not supported for the given target."""

    error_code = "UnsupportedOperation"

    def __init__(self, message: str = "Unsupported operation"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class PaymentVerificationException(AppException):
    """Payment could not be verified."""

    error_code = "PaymentVerificationError"

    def __init__(self, message: str = "Payment verification failed"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class PersistenceException(AppException):
    """Store-level failure."""

    error_code = "PersistenceError"

    def __init__(self, message: str = "An unexpected error occurred"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)


class SlotConflict(Exception):
    """Raised by the booking store when the slot key is already reserved."""
