"""Custom exception hierarchy for the dossier engine."""

class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(AppError):
    """Raised when input validation fails.

    Covers missing or empty required fields, out-of-range confidence
    scores, self-merges and cross-dossier references.
    """
    pass


class NotFoundError(AppError):
    """Raised when a referenced dossier, person, attribute or relationship does not exist."""
    pass


class ConflictError(AppError):
    """Raised when a write would duplicate a unique relationship tuple."""
    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class StoreUnavailable(DatabaseError):
    """Raised when the relational store times out or drops the connection mid-operation."""
    pass
