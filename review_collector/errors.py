"""Error taxonomy for the review collector."""


class ReviewCollectorError(Exception):
    """Base exception for review-collector."""


class ConfigurationError(ReviewCollectorError, ValueError):
    """Raised synchronously when Collector arguments or options are invalid."""


class CollectorStateError(ReviewCollectorError):
    """Raised when a single-use Collector is started a second time."""


class RetryableError(ReviewCollectorError):
    """A page attempt failed; the page may be fetched again."""


class TransportError(RetryableError):
    """The fetch collaborator could not deliver a payload."""


class DecodeError(RetryableError):
    """The payload could not be parsed into a tree."""


class StructuralError(DecodeError):
    """The tree parsed, but a review list or review did not have the expected shape."""


class RetriesExhaustedError(ReviewCollectorError):
    """Every attempt at one page failed; the app is abandoned.

    Reported through the ``done_collecting`` event, never raised out of
    ``Collector.collect()``.
    """

    def __init__(
        self,
        app_id: str,
        page_num: int,
        attempts: int,
        last_error: Exception | None = None,
    ):
        self.app_id = app_id
        self.page_num = page_num
        self.attempts = attempts
        self.last_error = last_error
        message = f"Gave up on app {app_id} page {page_num} after {attempts} attempts"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)
