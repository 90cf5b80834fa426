"""Error taxonomy shared by services and adapters."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-readable failure kinds exposed to callers."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UPSTREAM_FATAL = "upstream_fatal"
    NOT_CONFIGURED = "not_configured"
    STORAGE = "storage"
    INTERNAL = "internal"


class CaloriesError(Exception):
    """Base class for errors reported to callers as a failure kind."""

    kind: ErrorKind = ErrorKind.INTERNAL


class InputValidationError(CaloriesError):
    """Bad or missing input, raised before any side effect."""

    kind = ErrorKind.VALIDATION


class NotFoundError(CaloriesError):
    """A referenced log entry or dictionary entry does not exist."""

    kind = ErrorKind.NOT_FOUND


class UpstreamFatalError(CaloriesError):
    """The macro estimator failed where no fallback exists."""

    kind = ErrorKind.UPSTREAM_FATAL


class EstimatorNotConfiguredError(UpstreamFatalError):
    """The macro estimator has no credentials."""

    kind = ErrorKind.NOT_CONFIGURED


class StorageError(CaloriesError):
    """The persistent store rejected or failed a request."""

    kind = ErrorKind.STORAGE
