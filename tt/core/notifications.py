"""Periodic mark detection and the notification dispatcher.

Marks are recomputed from the absolute elapsed time on every tick rather than
counted, so a stalled tick (sleeping laptop, blocked event loop) still fires
each boundary exactly once when it catches up.
"""

from dataclasses import dataclass
from enum import Enum
from tt.common.logger import log
from tt.core.constants import MS_PER_HOUR, MS_PER_15_MINUTES, MS_PER_MINUTE
from tt.util.misc import format_time


class SoundType(str, Enum):
    WORK_COMPLETE = "work-complete"
    BIG_BEN = "big-ben"
    WORK_15 = "work-15"
    POMODORO_START = "pomodoro-start"
    POMODORO_COMPLETE = "pomodoro-complete"


@dataclass(frozen=True)
class MarkCrossing:
    hour_fired: bool
    hours: int
    last_hour_mark: int
    quarter_fired: bool
    minutes: int
    last_15min_mark: int


def evaluate_marks(elapsed, last_hour_mark, last_15min_mark):
    """Compare elapsed time against the stored high-water marks.

    The hour and 15 minute marks are independent, so both fire in the same
    tick at the top of an hour. When a mark does not fire its stored value is
    returned unchanged.
    """
    hours = elapsed // MS_PER_HOUR
    hour_fired = hours > last_hour_mark // MS_PER_HOUR
    quarters = elapsed // MS_PER_15_MINUTES
    quarter_fired = quarters > last_15min_mark // MS_PER_15_MINUTES
    return MarkCrossing(
        hour_fired=hour_fired,
        hours=hours,
        last_hour_mark=hours * MS_PER_HOUR if hour_fired else last_hour_mark,
        quarter_fired=quarter_fired,
        minutes=quarters * (MS_PER_15_MINUTES // MS_PER_MINUTE),
        last_15min_mark=quarters * MS_PER_15_MINUTES if quarter_fired else last_15min_mark,
    )


# Fans a notification out to an audio backend and a system-notification backend. Both are optional and both are
# best-effort: a backend failure is logged and never reaches the timer that asked for the notification.
#
# audio needs play(sound_type). system needs permission_granted() and show(title, message).
class Notifier:

    def __init__(self, audio=None, system=None, sound_enabled=True, system_enabled=True):
        self._audio = audio
        self._system = system
        self.sound_enabled = sound_enabled
        self.system_enabled = system_enabled

    def _dispatch(self, sound, title, message):
        log.info(f"Notification [{sound.value}]: {title} - {message}")
        if self.sound_enabled and self._audio is not None:
            try:
                self._audio.play(sound)
            except Exception:
                log.error(f"Error playing sound '{sound.value}'", exc_info=True)
        if self.system_enabled and self._system is not None:
            try:
                if self._system.permission_granted():
                    self._system.show(title, message)
            except Exception:
                log.error(f"Error showing system notification '{title}'", exc_info=True)

    def notify_work_start(self, project_name):
        self._dispatch(SoundType.POMODORO_START, "Work started", f'Started working on "{project_name}"')

    def notify_work_complete(self, project_name):
        self._dispatch(SoundType.WORK_COMPLETE, "Task complete", f'You finished working on "{project_name}"')

    def notify_hour_mark(self, project_name, hours):
        unit = "hour" if hours == 1 else "hours"
        self._dispatch(SoundType.BIG_BEN, "An hour of work",
                       f'You have been working on "{project_name}" for {hours} {unit}')

    def notify_quarter_mark(self, project_name, minutes):
        self._dispatch(SoundType.WORK_15, "15 minutes of work",
                       f'You have been working on "{project_name}" for {minutes} minutes')

    def notify_time_limit_reached(self, project_name, time_limit=None):
        suffix = f" ({format_time(time_limit)})" if time_limit else ""
        self._dispatch(SoundType.WORK_COMPLETE, "Time is up!", f'Time limit for "{project_name}" reached{suffix}')

    # finished_mode is the pomodoro phase that just ended ("work" or "rest").
    def notify_pomodoro_phase_complete(self, finished_mode, cycles, work_minutes, rest_minutes):
        if finished_mode == "work":
            title = "Time for a break!"
            message = f"You finished work period #{cycles}. Rest for {rest_minutes} minutes."
        else:
            title = "Back to work!"
            message = f"Break is over. Start a new {work_minutes}-minute work period."
        self._dispatch(SoundType.POMODORO_COMPLETE, title, message)
