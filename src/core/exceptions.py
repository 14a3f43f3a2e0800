"""Custom exception classes for the LMS API.

Every error carries the HTTP status code it maps to so that the exception
handlers registered in ``app.py`` can render a ``{"message": ...}`` body
without a per-route translation table.
"""


class LMSError(Exception):
    """Base exception for all LMS errors."""

    status_code = 500

    def __init__(self, message: str = "Server error"):
        """Initialize the exception.

        Args:
            message: Human readable message returned to the client.
        """
        self.message = message
        super().__init__(message)


class UnauthenticatedError(LMSError):
    """Raised when no valid token or no approved account backs a request."""

    status_code = 401

    def __init__(self, message: str = "Invalid authentication credentials"):
        super().__init__(message)


class ForbiddenError(LMSError):
    """Raised on a role mismatch or an ownership violation."""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(LMSError):
    """Raised when a referenced entity is absent or not visible to the caller."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str = None):
        """Initialize the exception.

        Args:
            entity: Human readable entity name, e.g. "Course".
            entity_id: The ID that was looked up, if any.
        """
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class InvalidInputError(LMSError):
    """Raised when input violates a schema or range rule."""

    status_code = 400


class InvalidStatusError(LMSError):
    """Raised when a status transition targets a value other than approved/rejected."""

    status_code = 400

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Invalid status: {status}. Must be 'approved' or 'rejected'.")


class InvalidStateError(LMSError):
    """Raised when a transition is not legal from the entity's current state."""

    status_code = 400


class ConflictError(LMSError):
    """Raised when a unique identity attribute (email) is already taken."""

    status_code = 409


class DuplicateEnrollmentError(ConflictError):
    """Raised when a student already holds an enrollment in the course."""

    def __init__(self, message: str = "Already enrolled in this course"):
        super().__init__(message)


class DuplicateReviewError(ConflictError):
    """Raised when a student already reviewed the course."""

    def __init__(self, message: str = "You have already reviewed this course"):
        super().__init__(message)


class UnavailableError(LMSError):
    """Raised when the database cannot be reached or times out."""

    status_code = 503

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__(message)
