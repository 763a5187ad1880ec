"""Errors raised while reading a batch CSV."""


class CsvFieldError(ValueError):
    """One field of one row could not be parsed."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class CsvStructureError(ValueError):
    """The CSV as a whole cannot be read (e.g. a required column is missing)."""
