from dataclasses import dataclass, replace
from PySide6.QtCore import QObject, Signal
from tt.common.logger import log
from tt.core.constants import (
    DEFAULT_POMODORO_REST_MINUTES,
    DEFAULT_POMODORO_WORK_MINUTES,
    MS_PER_SECOND,
    SECONDS_PER_MINUTE,
)
from tt.core.ticker import QtTickDriver
from tt.util.misc import format_clock, now_ms

MODE_WORK = "work"
MODE_REST = "rest"
MODES = (MODE_WORK, MODE_REST)


# Durations are minutes, time_left is seconds, last_updated is epoch ms.
@dataclass
class PomodoroState:
    work_duration: int = DEFAULT_POMODORO_WORK_MINUTES
    rest_duration: int = DEFAULT_POMODORO_REST_MINUTES
    mode: str = MODE_WORK
    is_running: bool = False
    time_left: int = DEFAULT_POMODORO_WORK_MINUTES * SECONDS_PER_MINUTE
    cycles: int = 0
    last_updated: int = 0

    def phase_seconds(self, mode=None):
        minutes = self.work_duration if (mode or self.mode) == MODE_WORK else self.rest_duration
        return minutes * SECONDS_PER_MINUTE

    def copy(self):
        return replace(self)

    def to_dict(self):
        return {
            "workDuration": self.work_duration,
            "restDuration": self.rest_duration,
            "mode": self.mode,
            "isRunning": self.is_running,
            "timeLeft": self.time_left,
            "cycles": self.cycles,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ValueError(f"Pomodoro state must be a dict, got {type(data).__name__}")

        state = cls()
        numbers = {
            "work_duration": "workDuration",
            "rest_duration": "restDuration",
            "time_left": "timeLeft",
            "cycles": "cycles",
            "last_updated": "lastUpdated",
        }
        for attr, key in numbers.items():
            if key in data:
                value = data[key]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"'{key}' must be a number")
                setattr(state, attr, int(value))

        mode = data.get("mode", MODE_WORK)
        if mode not in MODES:
            raise ValueError(f"Unknown pomodoro mode '{mode}'")
        state.mode = mode

        is_running = data.get("isRunning", False)
        if not isinstance(is_running, bool):
            raise ValueError("'isRunning' must be a bool")
        state.is_running = is_running

        if state.work_duration <= 0 or state.rest_duration <= 0:
            raise ValueError("Pomodoro durations must be positive")
        return state


class PomodoroTimer(QObject):
    """Work/rest countdown that keeps cycling until paused.

    The countdown is driven by wall-clock time, not by counting ticks, so a
    stalled event loop or a closed app catches up on the next tick/restore.
    Each phase end emits phase_completed with the mode that just finished.
    """

    state_changed = Signal()
    phase_completed = Signal(str)

    def __init__(self, persistence=None, notifier=None, tick_driver=None, clock=None, parent=None):
        super().__init__(parent)
        self._persistence = persistence
        self._notifier = notifier
        self._tick_driver = tick_driver if tick_driver is not None else QtTickDriver(parent=self)
        self._clock = clock or now_ms
        self._state = PomodoroState(last_updated=self._clock())

    #region === Read-only view ===

    @property
    def state(self):
        return self._state.copy()

    @property
    def mode(self):
        return self._state.mode

    @property
    def is_running(self):
        return self._state.is_running

    @property
    def time_left(self):
        return self._state.time_left

    @property
    def cycles(self):
        return self._state.cycles

    @property
    def work_duration(self):
        return self._state.work_duration

    @property
    def rest_duration(self):
        return self._state.rest_duration

    @property
    def time_display(self):
        return format_clock(self._state.time_left)

    @staticmethod
    def format_time(seconds):
        return format_clock(seconds)

    #endregion === Read-only view ===

    def _persist(self):
        if self._persistence is not None:
            self._persistence.save(self._state)

    def _changed(self):
        self._persist()
        self.state_changed.emit()

    # Switches to the next phase. Work -> rest counts a cycle, rest -> work doesn't. Returns the finished mode.
    def _switch_phase(self):
        state = self._state
        finished = state.mode
        if finished == MODE_WORK:
            state.mode = MODE_REST
            state.cycles += 1
        else:
            state.mode = MODE_WORK
        state.time_left = state.phase_seconds()
        log.info(f"Pomodoro {finished} phase complete, now {state.mode} (cycles: {state.cycles})")
        return finished

    # Applies whole seconds passed since last_updated, carrying any overflow into the following phases. The
    # sub-second remainder stays on last_updated. Whole work+rest rounds are skipped arithmetically, so only the
    # last finished phase is announced after a long gap.
    def _advance(self, now):
        state = self._state
        elapsed_seconds = (now - state.last_updated) // MS_PER_SECOND
        if elapsed_seconds <= 0:
            return
        state.last_updated += elapsed_seconds * MS_PER_SECOND

        finished = []
        while elapsed_seconds >= state.time_left:
            elapsed_seconds -= state.time_left
            finished.append(self._switch_phase())
            round_seconds = state.phase_seconds(MODE_WORK) + state.phase_seconds(MODE_REST)
            if elapsed_seconds >= round_seconds:
                skipped = elapsed_seconds // round_seconds
                state.cycles += skipped
                elapsed_seconds -= skipped * round_seconds
                log.info(f"Pomodoro skipped {skipped} full rounds while away")
        state.time_left -= elapsed_seconds

        if not finished:
            return
        if self._notifier is not None:
            self._notifier.notify_pomodoro_phase_complete(finished[-1], state.cycles, state.work_duration,
                                                          state.rest_duration)
        for mode in finished:
            self.phase_completed.emit(mode)

    #region === Operations ===

    def start(self):
        if self._state.is_running:
            return
        if self._state.time_left <= 0:
            self._state.time_left = self._state.phase_seconds()
        self._state.is_running = True
        self._state.last_updated = self._clock()
        self._tick_driver.start(self.tick)
        log.info(f"Pomodoro started in {self._state.mode} mode with {self._state.time_left}s left")
        self._changed()

    def pause(self):
        if not self._state.is_running:
            return
        now = self._clock()
        self._advance(now)
        self._state.is_running = False
        self._state.last_updated = now
        self._tick_driver.stop()
        log.info(f"Pomodoro paused with {self._state.time_left}s left")
        self._changed()

    def reset(self):
        self._tick_driver.stop()
        state = self._state
        state.is_running = False
        state.mode = MODE_WORK
        state.cycles = 0
        state.time_left = state.phase_seconds()
        state.last_updated = self._clock()
        log.info("Pomodoro reset")
        self._changed()

    def _set_duration(self, mode, minutes):
        if minutes is None or minutes <= 0:
            log.warning(f"Ignoring non-positive pomodoro {mode} duration: {minutes}")
            return
        if mode == MODE_WORK:
            self._state.work_duration = int(minutes)
        else:
            self._state.rest_duration = int(minutes)
        # A running countdown keeps its current phase length
        if not self._state.is_running and self._state.mode == mode:
            self._state.time_left = self._state.phase_seconds()
        self._changed()

    def set_work_duration(self, minutes):
        self._set_duration(MODE_WORK, minutes)

    def set_rest_duration(self, minutes):
        self._set_duration(MODE_REST, minutes)

    # Server-side defaults from the user's settings.
    def apply_settings(self, settings):
        self.set_work_duration(settings.pomodoro_work_time)
        self.set_rest_duration(settings.pomodoro_rest_time)

    def tick(self):
        try:
            if not self._state.is_running:
                self._tick_driver.stop()
                return
            self._advance(self._clock())
            self._changed()
        except Exception:
            log.exception("Unhandled error in pomodoro tick")

    def restore(self):
        """Load the saved countdown. Returns False if there was nothing usable to restore."""
        if self._persistence is None:
            return False
        saved = self._persistence.load()
        if saved is None:
            return False

        self._state = saved
        if saved.is_running:
            self._advance(self._clock())
            self._tick_driver.start(self.tick)
        log.info(f"Restored pomodoro: {saved.mode}, {saved.time_left}s left, running={saved.is_running}")
        self._changed()
        return True

    def shutdown(self):
        self._tick_driver.stop()
        self._persist()

    #endregion === Operations ===
