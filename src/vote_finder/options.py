"""Per-search options."""

from datetime import datetime
from typing import Any, Mapping, Optional

from dateutil.parser import parse as parse_date
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vote_finder.errors import ConfigurationError


class SearchOptions(BaseModel):
    """Overrides for a single search.

    Unset fields fall back to the finder's configured defaults. ``time``
    replaces "now" and is meant for testing and for previewing a date; a
    value that cannot be parsed is dropped and the real time is used.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_distance: Optional[float] = Field(default=None, ge=0, description="Miles")
    max_places: Optional[int] = Field(default=None, ge=1)
    time: Optional[datetime] = None

    @field_validator("max_distance", "max_places", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("time", mode="before")
    @classmethod
    def _parse_time(cls, value: Any) -> Any:
        if value is None or isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str):
            if not value.strip():
                return None
            try:
                parsed = parse_date(value)
            except (ValueError, OverflowError):
                logger.debug("Ignoring unparseable time override: {!r}", value)
                return None
        else:
            logger.debug("Ignoring time override of type {}", type(value).__name__)
            return None

        # Schedules are stored in local wall-clock time
        if parsed is not None and parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed


def resolve_options(options: SearchOptions | Mapping[str, Any] | None) -> SearchOptions:
    """Validate search options given as a mapping.

    Raises:
        ConfigurationError: For unknown option names or invalid values
    """
    if options is None:
        return SearchOptions()
    if isinstance(options, SearchOptions):
        return options

    try:
        return SearchOptions.model_validate(dict(options))
    except ValidationError as e:
        problems = []
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            if error["type"] == "extra_forbidden":
                problems.append(f'bad option "{field}" specified')
            else:
                problems.append(f"{field}: {error['msg']}")
        raise ConfigurationError("; ".join(problems)) from e
