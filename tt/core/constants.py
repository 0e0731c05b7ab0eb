# Time-related constants shared by the timer, pomodoro and recorder. Every duration is integer milliseconds.

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_15_MINUTES = 15 * MS_PER_MINUTE
MS_PER_HOUR = 60 * MS_PER_MINUTE

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE

# Segments shorter than this are never written as time entries (outside of test mode).
MIN_ENTRY_DURATION_MS = MS_PER_MINUTE
# Pausing this soon after starting counts as an accidental click and records nothing.
QUICK_TOGGLE_THRESHOLD_MS = 5 * MS_PER_SECOND

TICK_INTERVAL_MS = MS_PER_SECOND

# Keys inside the durable key-value store
TIMER_STATES_STORAGE_KEY = "timetracker-project-timers"
POMODORO_STATE_STORAGE_KEY = "timetracker-pomodoro-state"
ACCESS_TOKEN_STORAGE_KEY = "timetracker_access_token"

DEFAULT_POMODORO_WORK_MINUTES = 25
DEFAULT_POMODORO_REST_MINUTES = 5
