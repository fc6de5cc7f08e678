"""
Exceptions and warnings raised while building and managing count tables.
"""


class BagelError(Exception):
    """Base exception class for all count table errors."""

    def __init__(self, message="An error occurred while handling count tables", details=None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class NotABagelError(BagelError, TypeError):
    """Raised when an operation receives something other than a Bagel."""

    def __init__(self, message="The input object is not a 'Bagel' object, "
                               "please use 'Bagel(...)' to create one", details=None):
        super().__init__(message, details)


class MissingTableError(BagelError, KeyError):
    """Raised when a referenced table name is not in the registry."""

    def __init__(self, message="Count table does not exist", details=None):
        super().__init__(message, details)


class DuplicateNameError(BagelError):
    """Raised when a table name collides and overwrite was not requested."""

    def __init__(self, message="Table names must be unique", details=None):
        super().__init__(message, details)


class InvalidShapeError(BagelError, ValueError):
    """Raised for malformed count matrices or misaligned feature labels."""

    def __init__(self, message="Invalid count table shape", details=None):
        super().__init__(message, details)


class MissingDependentFieldError(BagelError, ValueError):
    """Raised when an optional field is given without the field it depends on."""

    def __init__(self, message="Missing dependent field", details=None):
        super().__init__(message, details)


class UnknownColumnError(BagelError, KeyError):
    """Raised when a requested column is absent from the input data."""

    def __init__(self, message="Column does not exist", details=None):
        super().__init__(message, details)


class ClassificationError(BagelError, ValueError):
    """Raised when a value does not map into the category enumeration."""

    def __init__(self, message="Value is not part of the category enumeration", details=None):
        super().__init__(message, details)


class TableWarning(UserWarning):
    """Non-fatal count table condition (overwrites, incomplete color mappings)."""
