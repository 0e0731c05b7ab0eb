from dataclasses import dataclass, field, replace
from enum import Enum
from tt.common.logger import log


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class InvalidTransitionError(ValueError):
    pass


# Storage keys, kept camelCase so snapshots stay readable by the web client's format.
_FIELD_KEYS = {
    "is_running": "isRunning",
    "is_paused": "isPaused",
    "start_time": "startTime",
    "elapsed_time": "elapsedTime",
    "paused_elapsed_time": "pausedElapsedTime",
    "recorded_elapsed_time": "recordedElapsedTime",
    "work_type_id": "workTypeId",
    "work_type_name": "workTypeName",
    "last_hour_mark": "lastHourMark",
    "last_15min_mark": "last15MinMark",
    "time_limit": "timeLimit",
}
_INT_FIELDS = ("start_time", "elapsed_time", "paused_elapsed_time", "recorded_elapsed_time", "last_hour_mark",
               "last_15min_mark")

# Timer state for a single project. All instants are epoch ms, all durations are ms.
#
# elapsed_time is the running total for the current run, and recorded_elapsed_time is how much of it has already been
# written as a time entry (pause records a segment but resume keeps counting from the same total).
@dataclass
class ProjectTimerState:
    is_running: bool = False
    is_paused: bool = False
    start_time: int = 0
    elapsed_time: int = 0
    paused_elapsed_time: int = 0
    recorded_elapsed_time: int = 0
    work_type_id: str | None = None
    work_type_name: str = ""
    last_hour_mark: int = 0
    last_15min_mark: int = 0
    time_limit: int | None = field(default=None)

    @property
    def status(self):
        if self.is_running:
            return TimerStatus.RUNNING
        if self.is_paused:
            return TimerStatus.PAUSED
        return TimerStatus.IDLE

    @property
    def unrecorded_time(self):
        return max(0, self.elapsed_time - self.recorded_elapsed_time)

    # Live elapsed value, without mutating anything.
    def live_elapsed(self, now):
        if self.is_running:
            return max(0, now - self.start_time)
        return self.elapsed_time

    def copy(self):
        return replace(self)

    #region === Transitions ===

    # Fresh run from idle: elapsed and both notification marks go back to zero.
    def start(self, now):
        if self.status != TimerStatus.IDLE:
            raise InvalidTransitionError(f"Cannot start a timer that is {self.status.value}")
        self.is_running = True
        self.is_paused = False
        self.start_time = now
        self.elapsed_time = 0
        self.paused_elapsed_time = 0
        self.recorded_elapsed_time = 0
        self.last_hour_mark = 0
        self.last_15min_mark = 0

    def pause(self, now):
        if self.status != TimerStatus.RUNNING:
            raise InvalidTransitionError(f"Cannot pause a timer that is {self.status.value}")
        self.freeze(now)
        self.paused_elapsed_time = self.elapsed_time
        self.start_time = 0
        self.is_running = False
        self.is_paused = True

    # Marks are left alone on resume so the next hour/15 minute notification still lands on the right boundary.
    def resume(self, now):
        if self.status != TimerStatus.PAUSED:
            raise InvalidTransitionError(f"Cannot resume a timer that is {self.status.value}")
        self.start_time = now - self.paused_elapsed_time
        self.elapsed_time = self.paused_elapsed_time
        self.paused_elapsed_time = 0
        self.is_running = True
        self.is_paused = False

    # Recomputes elapsed_time from the wall clock while running. A no-op otherwise.
    def freeze(self, now):
        if self.is_running:
            self.elapsed_time = max(self.elapsed_time, now - self.start_time)

    # Used when switching away from a project: a project that is not active is never left running.
    def demote(self, now):
        if self.is_running:
            self.pause(now)

    def mark_recorded(self):
        self.recorded_elapsed_time = self.elapsed_time

    # Back to idle. Work type and time limit survive since they're user choices and not part of the run.
    def reset(self):
        self.is_running = False
        self.is_paused = False
        self.start_time = 0
        self.elapsed_time = 0
        self.paused_elapsed_time = 0
        self.recorded_elapsed_time = 0
        self.last_hour_mark = 0
        self.last_15min_mark = 0

    #endregion === Transitions ===

    #region === Serialization ===

    def to_dict(self):
        return {key: getattr(self, attr) for attr, key in _FIELD_KEYS.items()}

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ValueError(f"Timer state must be a dict, got {type(data).__name__}")

        values = {}
        for attr, key in _FIELD_KEYS.items():
            if key not in data or data[key] is None:
                continue
            value = data[key]
            if attr in ("is_running", "is_paused"):
                if not isinstance(value, bool):
                    raise ValueError(f"'{key}' must be a bool")
            elif attr in _INT_FIELDS or attr == "time_limit":
                # JSON has no int/float split, browsers happily wrote floats here
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"'{key}' must be a number")
                value = int(value)
            elif attr == "work_type_id":
                value = str(value)
            elif attr == "work_type_name":
                if not isinstance(value, str):
                    raise ValueError(f"'{key}' must be a string")
            values[attr] = value

        state = cls(**values)
        stored_paused = state.is_paused and not state.is_running
        if state.is_running and state.is_paused:
            log.warning("Loaded a timer state marked both running and paused, treating it as paused.")
            state.is_running = False
            state.paused_elapsed_time = state.paused_elapsed_time or state.elapsed_time
            state.start_time = 0
        if state.is_running and state.start_time <= 0:
            log.warning("Loaded a running timer state without a start time, treating it as paused.")
            state.is_running = False
            state.is_paused = True
            state.paused_elapsed_time = state.elapsed_time
        # Older web-client snapshots don't track recorded time, and those clients wrote the entry on pause.
        if stored_paused and data.get("recordedElapsedTime") is None:
            state.recorded_elapsed_time = max(state.elapsed_time, state.paused_elapsed_time)
        return state

    #endregion === Serialization ===
