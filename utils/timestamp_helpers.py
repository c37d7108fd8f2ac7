"""
Duration parsing and Discord timestamp formatting utilities
"""
import enum
import re
import datetime as dt


DURATION_PART_RE = re.compile(r"^(\d+)([smhd])$")

UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}


class TimestampStyle(str, enum.Enum):
    """Discord timestamp format styles"""
    SHORT_TIME = "t"          # 16:20
    LONG_TIME = "T"           # 16:20:30
    SHORT_DATE = "d"          # 20/04/2021
    LONG_DATE = "D"           # 20 April 2021
    SHORT_DATETIME = "f"      # 20 April 2021 16:20
    LONG_DATETIME = "F"       # Tuesday, 20 April 2021 16:20
    RELATIVE = "R"            # 2 months ago


class DurationError(ValueError):
    """Raised when a duration part is present but not usable"""


def parse_duration_parts(args: list[str]) -> tuple[int, int]:
    """
    Consume leading duration tokens such as ``1h`` ``30m`` from an argument list.

    Args:
        args: Whitespace-split command arguments

    Returns:
        Tuple of (total_seconds, number_of_tokens_consumed).
        Parsing stops at the first token that is not ``<n>[smhd]``.

    Raises:
        DurationError: if a duration token has a zero value
    """
    total = 0
    consumed = 0
    for token in args:
        match = DURATION_PART_RE.match(token.lower())
        if not match:
            break
        number = int(match.group(1))
        if number <= 0:
            raise DurationError(token)
        total += number * UNIT_SECONDS[match.group(2)]
        consumed += 1
    return total, consumed


def format_duration(seconds: int | float | None) -> str:
    """Format a number of seconds as ``Xh Ym``"""
    seconds = int(seconds or 0)
    if seconds < 0:
        seconds = 0
    hours, remainder = divmod(seconds, 3600)
    return f"{hours}h {remainder // 60}m"


def discord_timestamp(moment: dt.datetime, style: TimestampStyle = TimestampStyle.RELATIVE) -> str:
    """Render a datetime as a Discord ``<t:unix:style>`` tag"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.timezone.utc)
    return f"<t:{int(moment.timestamp())}:{style.value}>"


def format_date(moment: dt.datetime | None, default: str = "Not watched") -> str:
    """Render a stored timestamp as ``YYYY-MM-DD``"""
    if moment is None:
        return default
    return moment.strftime("%Y-%m-%d")
