"""Custom exceptions for espresso-log."""


class EspressoLogError(Exception):
    """Base exception for espresso-log."""

    pass


class ValidationError(EspressoLogError):
    """Returned when a required field is missing or a number fails to parse."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class PersistenceError(EspressoLogError):
    """Raised when records cannot be read from or written to the backing store."""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key
        self.message = message
