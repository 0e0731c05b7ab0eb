import time
from datetime import datetime, timedelta, timezone
from tt.core.constants import MS_PER_SECOND, SECONDS_PER_HOUR, SECONDS_PER_MINUTE


# Wall-clock epoch milliseconds. This is the default clock for every timer in the app.
def now_ms():
    return int(time.time() * MS_PER_SECOND)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Converts epoch milliseconds into an aware UTC datetime, which is what the API expects.
def ms_to_datetime(ms):
    return _EPOCH + timedelta(milliseconds=ms)

# Naive datetimes are taken as local time.
def datetime_to_ms(dt):
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return (dt - _EPOCH) // timedelta(milliseconds=1)


def format_time(milliseconds):
    """Format a millisecond duration as HH:MM:SS. Negative values clamp to zero."""
    total_seconds = max(0, int(milliseconds)) // MS_PER_SECOND
    h, rem = divmod(total_seconds, SECONDS_PER_HOUR)
    m, s = divmod(rem, SECONDS_PER_MINUTE)
    return f"{h:02d}:{m:02d}:{s:02d}"

# Pomodoro countdowns are shown as MM:SS, minutes are allowed to run past 59.
def format_clock(seconds):
    seconds = max(0, int(seconds))
    m, s = divmod(seconds, SECONDS_PER_MINUTE)
    return f"{m:02d}:{s:02d}"

# Short "1h 05m" / "45m" form used for the daily total.
def format_human_readable(milliseconds):
    total_seconds = max(0, int(milliseconds)) // MS_PER_SECOND
    hours, rem = divmod(total_seconds, SECONDS_PER_HOUR)
    minutes = rem // SECONDS_PER_MINUTE
    if hours == 0:
        return f"{minutes}m"
    return f"{hours}h {minutes:02d}m"
