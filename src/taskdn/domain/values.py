"""Format-preserving value types for dates and cross-document references.

Both types are small closed hierarchies of frozen dataclasses. The
variant picked at parse time survives a round trip: a date-only value is
written back as ``YYYY-MM-DD`` and a reference keeps its link, path, or
filename shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time

# Tried in order; the first grammar that matches fixes the variant.
_DATETIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
)
_DATE_FORMAT = "%Y-%m-%d"
_DATETIME_OUTPUT = "%Y-%m-%dT%H:%M:%S"

_DOCUMENT_SUFFIX = ".md"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


class DateValue:
    """A point in time that remembers whether it carried a time of day.

    Ordering treats a date-only value as midnight of that date, so values
    of both variants can be sorted together. Equality is variant-aware:
    ``CalendarDate(d)`` never equals ``Timestamp(midnight of d)``.
    """

    @classmethod
    def parse(cls, text: str) -> DateValue:
        """Parse *text* as a datetime or bare date.

        Raises:
            ValueError: If no supported grammar matches.
        """
        value = text.strip()
        for fmt in _DATETIME_FORMATS:
            try:
                return Timestamp(datetime.strptime(value, fmt))
            except ValueError:
                continue
        try:
            return CalendarDate(datetime.strptime(value, _DATE_FORMAT).date())
        except ValueError:
            pass
        msg = f"expected YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS, got {text!r}"
        raise ValueError(msg)

    @classmethod
    def of(cls, value: date | datetime) -> DateValue:
        """Wrap a stdlib date or datetime in the matching variant."""
        if isinstance(value, datetime):
            return Timestamp(value.replace(microsecond=0))
        return CalendarDate(value)

    @classmethod
    def now(cls) -> Timestamp:
        """Current UTC time without an offset, truncated to whole seconds."""
        return Timestamp(datetime.now(UTC).replace(tzinfo=None, microsecond=0))

    @classmethod
    def today(cls) -> CalendarDate:
        return CalendarDate(datetime.now(UTC).date())

    def date(self) -> date:
        raise NotImplementedError

    def as_datetime(self) -> datetime:
        raise NotImplementedError

    @property
    def has_time(self) -> bool:
        return isinstance(self, Timestamp)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, DateValue):
            return NotImplemented
        return self.as_datetime() < other.as_datetime()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, DateValue):
            return NotImplemented
        return self.as_datetime() <= other.as_datetime()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, DateValue):
            return NotImplemented
        return self.as_datetime() > other.as_datetime()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, DateValue):
            return NotImplemented
        return self.as_datetime() >= other.as_datetime()


@dataclass(frozen=True)
class CalendarDate(DateValue):
    """A date without a time of day (``YYYY-MM-DD``)."""

    day: date

    def date(self) -> date:
        return self.day

    def as_datetime(self) -> datetime:
        return datetime.combine(self.day, time.min)

    def __str__(self) -> str:
        return self.day.isoformat()


@dataclass(frozen=True)
class Timestamp(DateValue):
    """A date with a time of day (``YYYY-MM-DDTHH:MM:SS``)."""

    moment: datetime

    def date(self) -> date:
        return self.moment.date()

    def as_datetime(self) -> datetime:
        return self.moment

    def __str__(self) -> str:
        return self.moment.strftime(_DATETIME_OUTPUT)


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class Reference:
    """A pointer to another document in one of three textual shapes.

    The stored shape is never normalized: ``str(Reference.parse(s))``
    reproduces *s* (minus surrounding whitespace).
    """

    @classmethod
    def parse(cls, text: str) -> Reference:
        """Classify *text* as a wikilink, relative path, or bare filename."""
        value = text.strip()
        if value.startswith("[[") and value.endswith("]]") and len(value) >= 4:
            target, sep, display = value[2:-2].partition("|")
            return WikiLink(target.strip(), display.strip() if sep else None)
        if value.startswith(("./", "../")):
            return RelativePath(value)
        return Filename(value)

    def display_name(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class WikiLink(Reference):
    """``[[target]]`` or ``[[target|display]]``."""

    target: str
    display: str | None = None

    @property
    def page(self) -> str:
        """Link target without any ``#heading`` fragment."""
        return self.target.partition("#")[0].strip()

    def display_name(self) -> str:
        return self.display if self.display is not None else self.target

    def __str__(self) -> str:
        if self.display is None:
            return f"[[{self.target}]]"
        return f"[[{self.target}|{self.display}]]"


@dataclass(frozen=True)
class RelativePath(Reference):
    """A path starting with ``./`` or ``../``."""

    path: str

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def target(self) -> str:
        return self.path

    def display_name(self) -> str:
        return self.filename.removesuffix(_DOCUMENT_SUFFIX)

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class Filename(Reference):
    """A bare filename such as ``my-project.md``."""

    name: str

    @property
    def target(self) -> str:
        return self.name

    def display_name(self) -> str:
        return self.name.removesuffix(_DOCUMENT_SUFFIX)

    def __str__(self) -> str:
        return self.name
