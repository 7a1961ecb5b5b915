"""Data models for espresso-log."""

import math
import uuid
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from espresso_log.exceptions import ValidationError

GRIND_MIN = 1.0
GRIND_MAX = 10.0
GRIND_STEP = 0.5
GRIND_DEFAULT = 5.0


class RoastLevel(str, Enum):
    """Roast level of a bean, stored by its display label."""

    LIGHT = "Light"
    MEDIUM = "Medium"
    DARK = "Dark"


class Freshness(str, Enum):
    """Freshness category derived from days since roast."""

    VERY_FRESH = "Very Fresh"
    FRESH = "Fresh"
    GOOD = "Good"
    FAIR = "Fair"
    OLD = "Old"


# (last day inclusive, category)
_FRESHNESS_STEPS = (
    (3, Freshness.VERY_FRESH),
    (7, Freshness.FRESH),
    (14, Freshness.GOOD),
    (21, Freshness.FAIR),
)


def freshness_for_days(days: int) -> Freshness:
    """Map a day count onto its freshness category."""
    for last_day, category in _FRESHNESS_STEPS:
        if days <= last_day:
            return category
    return Freshness.OLD


def _as_date(moment: date | datetime) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(moment, datetime):
        return moment.date()
    return moment


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Bean(_Record):
    """One physical batch of coffee."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    roast_level: RoastLevel
    origin: str
    roast_date: date

    @field_validator("roast_date", mode="before")
    @classmethod
    def roast_date_without_time(cls, value):
        # roast dates may be stored with a time of day, only the calendar date counts
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value.strip()) > 10:
            text = value.strip()
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            try:
                return datetime.fromisoformat(text).date()
            except ValueError:
                return value
        return value

    def days_since_roast(self, as_of: date | datetime) -> int:
        """Whole calendar days between the roast date and ``as_of``.

        Time of day is ignored, so the count steps by one at each midnight.
        """
        return (_as_date(as_of) - self.roast_date).days

    def freshness(self, as_of: date | datetime) -> Freshness:
        return freshness_for_days(self.days_since_roast(as_of))


class Shot(_Record):
    """One espresso extraction with a frozen copy of the bean used."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    date: datetime
    grind_setting: float
    coffee_bean: Bean
    dose: float
    yield_: float = Field(alias="yield")
    shot_time: float
    taste_notes: str = ""

    @property
    def extraction_ratio(self) -> float:
        """Yield divided by dose, unrounded."""
        return self.yield_ / self.dose


def parse_number(value: str | float | int | None) -> float | None:
    """Parse user-entered numeric text, returning None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = value.strip()
        # float() accepts digit separators, a text field should not
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def parse_roast_level(value: RoastLevel | str) -> RoastLevel | None:
    if isinstance(value, RoastLevel):
        return value
    text = (value or "").strip()
    for level in RoastLevel:
        if text.lower() == level.value.lower():
            return level
    return None


def create_bean(
    name: str,
    roast_level: RoastLevel | str,
    origin: str,
    roast_date: date | datetime,
) -> Bean | ValidationError:
    """Build a Bean from user input.

    Name and origin are trimmed and must be non-empty. The error is
    returned rather than raised so form code can treat it as
    "cannot advance".
    """
    origin = (origin or "").strip()
    if not origin:
        return ValidationError("origin", "origin is required")

    level = parse_roast_level(roast_level)
    if level is None:
        return ValidationError("roast_level", f"unknown roast level: {roast_level!r}")

    name = (name or "").strip()
    if not name:
        return ValidationError("name", "name is required")

    return Bean(
        name=name,
        roast_level=level,
        origin=origin,
        roast_date=_as_date(roast_date),
    )


def create_shot(
    bean: Bean | None,
    *,
    grind_setting: float,
    dose: str | float,
    yield_: str | float,
    shot_time: float,
    taste_notes: str = "",
    recorded_at: datetime | None = None,
) -> Shot | ValidationError:
    """Build a Shot from user input.

    Dose must parse to a number greater than zero. Yield only has to
    parse, since a choked shot can legitimately yield nothing.
    """
    if bean is None:
        return ValidationError("bean", "a bean must be selected")

    dose_value = parse_number(dose)
    if dose_value is None:
        return ValidationError("dose", f"not a number: {dose!r}")
    if dose_value <= 0:
        return ValidationError("dose", "dose must be greater than zero")

    yield_value = parse_number(yield_)
    if yield_value is None:
        return ValidationError("yield", f"not a number: {yield_!r}")

    return Shot(
        date=recorded_at or datetime.now(),
        grind_setting=grind_setting,
        coffee_bean=bean.model_copy(),
        dose=dose_value,
        yield_=yield_value,
        shot_time=shot_time,
        taste_notes=taste_notes,
    )


def format_ratio(ratio: float) -> str:
    return f"{ratio:.2f}"


def format_grams(grams: float) -> str:
    return f"{grams:.1f}g"


def format_seconds(seconds: float) -> str:
    return f"{seconds:.0f}s"


def format_grind(setting: float) -> str:
    return f"{setting:.1f}"
