"""Errors raised by the import parsers."""


class ImportFormatError(ValueError):
    """Raised when imported content cannot be turned into tasks.

    The message is human-readable and safe to show to the user.
    """


NO_VALID_TASKS = "No valid tasks found"
