from dataclasses import dataclass


@dataclass
class SourceState:
    """Progress of the app currently being collected.

    Owned by the pagination controller while the app is active.
    """

    app_id: str
    page_num: int = 0
    retries: int = 0


@dataclass(frozen=True)
class SourceOutcome:
    app_id: str
    page_num: int
    pages_collected: int
    reviews_collected: int
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
