import logging

from review_collector.models.source import SourceState

logger = logging.getLogger("review_collector.collector.retry")


class RetryPolicy:
    """Per-page retry budget for the active app.

    Counting only: the pagination controller already waits the configured
    delay before every attempt. Transport, decode and structural failures all
    draw on the same budget.
    """

    def __init__(self, max_retries: int):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.max_retries = max_retries

    def record_failure(self, state: SourceState) -> bool:
        """Count a failed attempt. Returns True if the page should be fetched again."""
        state.retries += 1
        should_retry = state.retries < self.max_retries
        logger.debug(
            "app=%s page=%d failure %d/%d%s",
            state.app_id,
            state.page_num,
            state.retries,
            self.max_retries,
            "" if should_retry else " (exhausted)",
        )
        return should_retry

    def reset(self, state: SourceState) -> None:
        state.retries = 0

    def exhausted(self, state: SourceState) -> bool:
        return state.retries >= self.max_retries
