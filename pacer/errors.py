"""Error kinds raised by the pacer core and its data-access boundary."""


class PacerError(Exception):
    """Base class for all pacer errors"""
    retryable = False


class InvalidInputError(PacerError):
    """Malformed or out-of-range caller input (e.g. non-positive problem total)"""


class InvalidPlanError(PacerError):
    """An internally inconsistent plan (end before start, all-zero week, ...)"""


class NotFoundError(PacerError):
    """A referenced textbook, plan, exam or university does not exist"""

    def __init__(self, kind: str, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key} not found")


class DependencyError(PacerError):
    """The persistence layer failed; the request may be retried"""
    retryable = True
