from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from review_collector.config import settings
from review_collector.errors import ConfigurationError


class CollectorOptions(BaseModel):
    """Options for one collector run, fixed for the lifetime of the run.

    Defaults come from ``settings`` so they can be changed through the
    environment or a ``.env`` file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_pages: int = Field(
        default_factory=lambda: settings.default_max_pages, ge=0, strict=True
    )
    user_agent: str = Field(
        default_factory=lambda: settings.user_agent, min_length=1, strict=True
    )
    delay: int = Field(
        default_factory=lambda: settings.default_delay_ms, ge=0, strict=True
    )  # milliseconds before every request
    max_retries: int = Field(
        default_factory=lambda: settings.default_max_retries, ge=1, strict=True
    )
    caller_driven_pagination: bool = Field(default=False, strict=True)

    @property
    def delay_seconds(self) -> float:
        return self.delay / 1000

    @property
    def max_pages_overridden(self) -> bool:
        return "max_pages" in self.model_fields_set

    @classmethod
    def build(
        cls,
        options: "CollectorOptions | Mapping[str, Any] | None" = None,
        **overrides: Any,
    ) -> "CollectorOptions":
        """Merge explicit options and keyword overrides into a validated instance."""
        if isinstance(options, CollectorOptions):
            if not overrides:
                return options
            values = options.model_dump(include=options.model_fields_set)
        elif options is None:
            values = {}
        elif isinstance(options, Mapping):
            values = dict(options)
        else:
            raise ConfigurationError(
                f"options must be a CollectorOptions or a mapping, not {type(options).__name__}"
            )
        values.update(overrides)

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid collector options: {e}") from e
