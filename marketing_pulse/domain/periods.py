"""Calendar period resolution: reporting windows and their year-over-year windows.

Everything here is pure. Dates travel as ``datetime.date`` internally and as
ISO ``YYYY-MM-DD`` strings on :class:`Period`, so range checks can compare
strings directly.

Week logic follows ISO-8601: weeks start on Monday, and week 1 is the week
containing January 4th. Year-over-year weeks are resolved by week *number*
in the prior ISO year rather than by subtracting 364/365 days.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from marketing_pulse.domain.models import Period, PeriodKind, require_iso_date

WEEKDAY_LABELS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
DEFAULT_OFFSETS: dict[PeriodKind, int] = {
    PeriodKind.DAY: 1,
    PeriodKind.WEEK: 1,
    PeriodKind.MONTH: 1,
    PeriodKind.WTD: 0,
    PeriodKind.MTD: 0,
}


def parse_date(value: Any) -> date:
    """Accept a ``date``, a ``datetime`` or an ISO string; anything else is a caller error."""
    if isinstance(value, datetime):
        return resolve_anchor(value)
    if isinstance(value, date):
        return value
    return date.fromisoformat(require_iso_date(value))


def format_date(value: date) -> str:
    return value.isoformat()


def resolve_anchor(anchor: date | datetime | str | None = None) -> date:
    """Collapse an anchor instant to a calendar date in the local timezone."""
    if anchor is None:
        return date.today()
    if isinstance(anchor, datetime):
        if anchor.tzinfo is not None:
            return anchor.astimezone().date()
        return anchor.date()
    if isinstance(anchor, date):
        return anchor
    return parse_date(anchor)


def _validate_month(month: int) -> None:
    if not isinstance(month, int) or month < 1 or month > 12:
        raise ValueError(f"month must be in 1..12, got {month!r}")


def _validate_offset(offset: int) -> None:
    if not isinstance(offset, int) or offset < 0:
        raise ValueError(f"offset must be a non-negative integer, got {offset!r}")


def days_from_monday(value: date) -> int:
    # Monday=0 .. Sunday=6
    return value.weekday()


def monday_of(value: date) -> date:
    return value - timedelta(days=days_from_monday(value))


def week_one_monday(year: int) -> date:
    jan4 = date(year, 1, 4)
    return monday_of(jan4)


def iso_week_year(value: date) -> int:
    thursday = value + timedelta(days=3 - days_from_monday(value))
    return thursday.year


def iso_week_number(value: date) -> int:
    thursday = value + timedelta(days=3 - days_from_monday(value))
    return (thursday - week_one_monday(thursday.year)).days // 7 + 1


def last_day_of_month(year: int, month: int) -> date:
    """Day 0 of the following month."""
    _validate_month(month)
    if month == 12:
        return date(year + 1, 1, 1) - timedelta(days=1)
    return date(year, month + 1, 1) - timedelta(days=1)


def shift_year(value: date, years: int = -1) -> date:
    target_year = value.year + years
    last_day = last_day_of_month(target_year, value.month).day
    return date(target_year, value.month, min(value.day, last_day))


# ---------------------------------------------------------------------------
# Year-over-year counterparts
# ---------------------------------------------------------------------------


def same_day_last_year(day: date | str) -> tuple[str, str]:
    target = shift_year(parse_date(day))
    return format_date(target), format_date(target)


def same_week_last_year(day: date | str) -> tuple[str, str]:
    """Monday..Sunday of the same ISO week number, one ISO year earlier."""
    value = parse_date(day)
    week_number = iso_week_number(value)
    monday = week_one_monday(iso_week_year(value) - 1) + timedelta(days=(week_number - 1) * 7)
    return format_date(monday), format_date(monday + timedelta(days=6))


def same_month_last_year(month: int, year: int) -> tuple[str, str]:
    _validate_month(month)
    return format_date(date(year - 1, month, 1)), format_date(last_day_of_month(year - 1, month))


# ---------------------------------------------------------------------------
# Period constructors
# ---------------------------------------------------------------------------


def day_label(value: date) -> str:
    return f"{WEEKDAY_LABELS[value.weekday()]} {MONTH_ABBREVIATIONS[value.month - 1]} {value.day}, {value.year}"


def day_period(day: date | str) -> Period:
    value = parse_date(day)
    yoy_start, yoy_end = same_day_last_year(value)
    return Period(
        kind=PeriodKind.DAY,
        start=format_date(value),
        end=format_date(value),
        label=day_label(value),
        yoy_start=yoy_start,
        yoy_end=yoy_end,
    )


def yesterday_period(anchor: date | datetime | str | None = None) -> Period:
    return day_period(resolve_anchor(anchor) - timedelta(days=1))


def week_period(anchor: date | datetime | str | None = None, weeks_ago: int = 0) -> Period:
    _validate_offset(weeks_ago)
    today = resolve_anchor(anchor)
    monday = today - timedelta(days=days_from_monday(today) + 7 * weeks_ago)
    sunday = monday + timedelta(days=6)
    yoy_start, yoy_end = same_week_last_year(monday)
    return Period(
        kind=PeriodKind.WEEK,
        start=format_date(monday),
        end=format_date(sunday),
        label=f"Week {iso_week_number(monday)}, {iso_week_year(monday)}",
        yoy_start=yoy_start,
        yoy_end=yoy_end,
    )


def month_period(month: int, year: int) -> Period:
    _validate_month(month)
    yoy_start, yoy_end = same_month_last_year(month, year)
    return Period(
        kind=PeriodKind.MONTH,
        start=format_date(date(year, month, 1)),
        end=format_date(last_day_of_month(year, month)),
        label=f"{MONTH_NAMES[month - 1]} {year}",
        yoy_start=yoy_start,
        yoy_end=yoy_end,
    )


def months_ago_period(anchor: date | datetime | str | None = None, months_ago: int = 1) -> Period:
    _validate_offset(months_ago)
    today = resolve_anchor(anchor)
    year, month_index = divmod(today.year * 12 + (today.month - 1) - months_ago, 12)
    return month_period(month_index + 1, year)


def previous_month_period(anchor: date | datetime | str | None = None) -> Period:
    return months_ago_period(anchor, months_ago=1)


def wtd_period(through: date | str) -> Period:
    """Monday through ``through``; YoY is the same weekday span of the same ISO week last year."""
    end = parse_date(through)
    offset = days_from_monday(end)
    monday = end - timedelta(days=offset)
    label = WEEKDAY_LABELS[0] if offset == 0 else f"{WEEKDAY_LABELS[0]}–{WEEKDAY_LABELS[offset]}"

    yoy_monday = date.fromisoformat(same_week_last_year(end)[0])
    return Period(
        kind=PeriodKind.WTD,
        start=format_date(monday),
        end=format_date(end),
        label=label,
        yoy_start=format_date(yoy_monday),
        yoy_end=format_date(yoy_monday + timedelta(days=offset)),
    )


def mtd_period(through: date | str) -> Period:
    """1st of the month through ``through``; YoY uses the same day numbers last year.

    When the prior year's month is shorter than the through-day (Feb 29 against a
    non-leap February), the YoY end is clamped to that month's last day.
    """
    end = parse_date(through)
    start = end.replace(day=1)
    label = f"{MONTH_ABBREVIATIONS[end.month - 1]} {start.day}–{end.day}"
    return Period(
        kind=PeriodKind.MTD,
        start=format_date(start),
        end=format_date(end),
        label=label,
        yoy_start=format_date(shift_year(start)),
        yoy_end=format_date(shift_year(end)),
    )


def resolve_period(
    kind: PeriodKind | str,
    anchor: date | datetime | str | None = None,
    offset: int | None = None,
) -> Period:
    """Resolve a period kind against an anchor ("now" by default).

    ``offset`` counts units back from the anchor: days for DAY (default 1,
    i.e. yesterday), weeks for WEEK and months for MONTH (default 1, the last
    complete one), and days for WTD/MTD through-dates (default 0, the anchor
    itself).
    """
    period_kind = PeriodKind(kind)
    steps = DEFAULT_OFFSETS[period_kind] if offset is None else offset
    _validate_offset(steps)
    today = resolve_anchor(anchor)

    if period_kind is PeriodKind.DAY:
        return day_period(today - timedelta(days=steps))
    if period_kind is PeriodKind.WEEK:
        return week_period(today, weeks_ago=steps)
    if period_kind is PeriodKind.MONTH:
        return months_ago_period(today, months_ago=steps)
    if period_kind is PeriodKind.WTD:
        return wtd_period(today - timedelta(days=steps))
    return mtd_period(today - timedelta(days=steps))
