r"""Date formatting used to encode dates in JSON payloads."""

from __future__ import annotations

__all__ = ["DEFAULT_DATE_PATTERN", "DateFormatter"]

from datetime import datetime, timezone, tzinfo

# ISO-8601-like pattern with millisecond precision, e.g. 2017-09-09T12:00:00.000Z
DEFAULT_DATE_PATTERN = "%Y-%m-%dT%H:%M:%S.%fZ"


class DateFormatter:
    r"""Format and parse dates with a ``strftime`` pattern.

    Args:
        pattern: The ``strftime``/``strptime`` pattern.
        tz: Time zone used to render dates and to interpret parsed
            dates without offset. Defaults to UTC.
        millisecond_precision: If ``True``, ``%f`` renders 3 digits
            instead of 6 when formatting.

    Example:
        ```pycon
        >>> from datetime import datetime, timezone
        >>> from netkit.codec.dates import DateFormatter
        >>> formatter = DateFormatter()
        >>> formatter.format(datetime(2017, 9, 9, 12, 0, tzinfo=timezone.utc))
        '2017-09-09T12:00:00.000Z'
        >>> formatter.parse("2017-09-09T13:00:00.000Z")
        datetime.datetime(2017, 9, 9, 13, 0, tzinfo=datetime.timezone.utc)

        ```
    """

    def __init__(
        self,
        pattern: str = DEFAULT_DATE_PATTERN,
        tz: tzinfo = timezone.utc,
        millisecond_precision: bool = True,
    ) -> None:
        self.pattern = pattern
        self.tz = tz
        self.millisecond_precision = millisecond_precision

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(pattern={self.pattern!r}, tz={self.tz!r})"

    def format(self, value: datetime) -> str:
        """Render a date. Naive dates are assumed to be in ``tz``."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.tz)
        value = value.astimezone(self.tz)
        pattern = self.pattern
        if self.millisecond_precision:
            pattern = pattern.replace("%f", f"{value.microsecond // 1000:03d}")
        return value.strftime(pattern)

    def parse(self, text: str) -> datetime:
        """Parse a date rendered with ``pattern``.

        Raises:
            ValueError: If ``text`` does not match the pattern.
        """
        value = datetime.strptime(text, self.pattern)  # noqa: DTZ007
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.tz)
        return value
