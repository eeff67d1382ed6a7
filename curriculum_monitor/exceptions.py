"""Exception hierarchy."""


class CurriculumMonitorError(Exception):
    """Base class for all curriculum monitor errors."""


class ValidationError(CurriculumMonitorError):
    """A required input field is missing or malformed."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = list(errors or [])


class AuthError(CurriculumMonitorError):
    """Credentials or one-time code did not match."""


class ConflictError(CurriculumMonitorError):
    """An identity is already registered."""


class NotFoundError(CurriculumMonitorError):
    """Unknown category or identity."""


class TransportError(CurriculumMonitorError):
    """The backing store could not be reached or failed."""


class ComputationError(CurriculumMonitorError):
    """Snapshot data reaching the engine is non-numeric or incomplete."""
