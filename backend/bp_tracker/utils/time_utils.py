"""
Display timezone handling.

All user-facing times are shown in a fixed display offset (IST, UTC+5:30,
no daylight saving) while readings are stored as UTC instants. The offset
lives in DISPLAY_OFFSET only; everything else derives from it.

Naive datetimes are treated as UTC, since that is how the database hands
stored timestamps back.
"""
from datetime import datetime, timedelta, timezone

DISPLAY_OFFSET = timedelta(hours=5, minutes=30)
DISPLAY_TZ = timezone(DISPLAY_OFFSET, 'IST')

# Tolerance for client clock skew when rejecting future readings
FUTURE_GRACE = timedelta(hours=1)

DATETIME_LOCAL_FORMAT = '%Y-%m-%dT%H:%M'
BUCKET_KEY_FORMAT = '%Y-%m-%d'


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_display() -> datetime:
    return now_utc().astimezone(DISPLAY_TZ)


def as_utc(instant: datetime) -> datetime:
    """Return an aware UTC datetime, reading naive values as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_display(instant):
    """Shift a stored instant into the display timezone."""
    if not instant:
        return None
    return as_utc(instant).astimezone(DISPLAY_TZ)


def to_storage(wall_clock: str) -> datetime:
    """
    Convert a display-local wall-clock string to an aware UTC datetime.

    Strings without an offset (e.g. a datetime-local form value
    '2024-01-15T23:50') are read as display time. Strings that carry an
    explicit offset or a trailing 'Z' keep their own offset.

    Raises:
        ValueError: if the string cannot be parsed, or the instant falls
            outside the representable date range once shifted to UTC.
    """
    if not isinstance(wall_clock, str) or not wall_clock.strip():
        raise ValueError('Timestamp must be a non-empty string')

    parsed = datetime.fromisoformat(wall_clock.strip().replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=DISPLAY_TZ)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f'Timestamp out of range: {wall_clock!r}') from e


def to_naive_utc(instant: datetime) -> datetime:
    """UTC instant without tzinfo, the form the database columns hold."""
    return as_utc(instant).replace(tzinfo=None)


def to_datetime_local(instant) -> str:
    """Render a stored instant as a display-local datetime-local value."""
    display = to_display(instant)
    if display is None:
        return ''
    return display.strftime(DATETIME_LOCAL_FORMAT)


def format_display_date(instant, month: str = '2-digit') -> str:
    """
    Format the display-local date.

    month='2-digit' gives '15/01/2024', month='short' gives '15 Jan 2024'.
    """
    display = to_display(instant)
    if display is None:
        return ''
    if month == 'short':
        return display.strftime('%d %b %Y')
    return display.strftime('%d/%m/%Y')


def format_display_time(instant, hour12: bool = True) -> str:
    """Format the display-local time, '08:30 PM' or '20:30'."""
    display = to_display(instant)
    if display is None:
        return ''
    if hour12:
        return display.strftime('%I:%M %p')
    return display.strftime('%H:%M')


def format_display_datetime(instant) -> str:
    if not instant:
        return ''
    return f'{format_display_date(instant)} {format_display_time(instant)}'


def format_chart_date(instant) -> str:
    """Short axis label such as '5 Jan'."""
    display = to_display(instant)
    if display is None:
        return ''
    return f"{display.day} {display.strftime('%b')}"


def display_offset_string() -> str:
    """The display offset as '+05:30'."""
    total_minutes = int(DISPLAY_OFFSET.total_seconds() // 60)
    sign = '+' if total_minutes >= 0 else '-'
    hours, minutes = divmod(abs(total_minutes), 60)
    return f'{sign}{hours:02d}:{minutes:02d}'


def day_bucket_key(instant) -> str:
    """Calendar date of the instant in the display timezone (YYYY-MM-DD).

    Readings near local midnight land in the local day, not the UTC day.
    """
    display = to_display(instant)
    if display is None:
        return ''
    return display.strftime(BUCKET_KEY_FORMAT)


def week_bucket_key(instant) -> str:
    """Display-local date of the Monday that starts the instant's week."""
    display = to_display(instant)
    if display is None:
        return ''
    monday = display.date() - timedelta(days=display.weekday())
    return monday.strftime(BUCKET_KEY_FORMAT)


def is_future(instant: datetime, now: datetime = None, grace: timedelta = FUTURE_GRACE) -> bool:
    """True if the instant is more than `grace` past the current UTC instant."""
    now = as_utc(now) if now is not None else now_utc()
    return as_utc(instant) > now + grace


def is_today(instant, now: datetime = None) -> bool:
    """True if the instant falls on the current display-local date."""
    if not instant:
        return False
    now = now if now is not None else now_utc()
    return day_bucket_key(instant) == day_bucket_key(now)


def relative_time(instant, now: datetime = None) -> str:
    """Human-friendly age such as '2 hours ago'."""
    if not instant:
        return ''
    now = as_utc(now) if now is not None else now_utc()
    diff = now - as_utc(instant)

    minutes = int(diff.total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return 'Just now'
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days < 7:
        return f"{days} day{'s' if days > 1 else ''} ago"
    return format_display_date(instant)
