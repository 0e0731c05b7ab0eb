from .misc import now_ms, ms_to_datetime, datetime_to_ms, format_time, format_clock, format_human_readable

__all__ = ["now_ms", "ms_to_datetime", "datetime_to_ms", "format_time", "format_clock", "format_human_readable"]
