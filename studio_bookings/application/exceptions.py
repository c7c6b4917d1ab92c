class ResourceNotFoundError(LookupError):
    """Raised when a resource is missing, inactive or not bookable."""
    pass


class BookingNotFoundError(LookupError):
    """Raised when a booking id does not exist."""
    pass


class BookingConflictError(RuntimeError):
    """Raised by storage when an insert/update would overlap an occupying booking."""
    pass


class InvalidBookingStateError(RuntimeError):
    """Raised when a status transition is not allowed (e.g. rescheduling a cancelled booking)."""
    pass
