"""The active project's timer: the single source of truth the UI renders.

One project is active at a time. Its state lives here in memory and is
mirrored into the durable snapshot map on every change. Inactive projects only
exist as snapshots, and never as running ones.
"""

import requests
from PySide6.QtCore import QObject, Signal
from tt.api.client import ApiError
from tt.common.logger import log
from tt.core.constants import QUICK_TOGGLE_THRESHOLD_MS
from tt.core.notifications import evaluate_marks
from tt.core.persistence import SnapshotConflictError
from tt.core.ticker import QtTickDriver
from tt.core.timer_state import ProjectTimerState, TimerStatus
from tt.util.misc import format_time, now_ms

STATUS_READY = "Ready"
STATUS_RUNNING = "Running"
STATUS_PAUSED = "Paused"
STATUS_RESUMED = "Resumed"


class ProjectTimer(QObject):

    state_changed = Signal()
    error_occurred = Signal(str)

    def __init__(self, api, persistence, recorder, notifier, tick_driver=None, clock=None, parent=None):
        super().__init__(parent)
        self._api = api
        self._persistence = persistence
        self._recorder = recorder
        self._notifier = notifier
        self._tick_driver = tick_driver if tick_driver is not None else QtTickDriver(parent=self)
        self._clock = clock or now_ms

        self._project_id = None
        self._project_name = ""
        self._state = ProjectTimerState()
        self._status_text = STATUS_READY
        self._finishing = False

    #region === Read-only view ===

    @property
    def project_id(self):
        return self._project_id

    @property
    def project_name(self):
        return self._project_name

    @property
    def state(self):
        return self._state.copy()

    @property
    def status(self):
        return self._state.status

    @property
    def is_running(self):
        return self._state.is_running

    @property
    def is_paused(self):
        return self._state.is_paused

    @property
    def elapsed_time(self):
        return self._state.elapsed_time

    @property
    def time_limit(self):
        return self._state.time_limit

    @property
    def work_type_id(self):
        return self._state.work_type_id

    @property
    def timer_value(self):
        return format_time(self._state.elapsed_time)

    @property
    def status_text(self):
        return self._status_text

    @property
    def daily_total(self):
        return self._recorder.daily_total

    @staticmethod
    def format_time(milliseconds):
        return format_time(milliseconds)

    #endregion === Read-only view ===

    #region === Internal helpers ===

    def _report_error(self, message):
        log.error(message)
        self.error_occurred.emit(message)

    def _persist(self):
        if self._project_id is None:
            return
        try:
            self._persistence.save_project_state(self._project_id, self._state)
        except (SnapshotConflictError, OSError) as e:
            log.error(f"Could not save timer snapshot for project '{self._project_id}': {e}")

    def _start_ticking(self):
        self._tick_driver.start(self.tick)

    def _stop_ticking(self):
        self._tick_driver.stop()

    # Loads a snapshot into the active slot. A snapshot that was running keeps running, with elapsed recomputed from
    # its start time so time spent away (app closed, other project) is counted.
    def _apply_saved_state(self, saved):
        now = self._clock()
        self._state = saved.copy() if saved is not None else self._persistence.default_state()

        if self._state.is_running:
            self._state.freeze(now)
            self._status_text = STATUS_RUNNING
            self._start_ticking()
        elif self._state.is_paused:
            self._state.elapsed_time = self._state.paused_elapsed_time
            self._status_text = STATUS_PAUSED
        else:
            self._state.reset()
            self._status_text = STATUS_READY
        log.debug(f"Applied {self._state.status.value} snapshot for project '{self._project_id}' "
                  f"(elapsed {self._state.elapsed_time}ms)")

    # Sends the not-yet-recorded part of the current run to the recorder, ending at `now`.
    def _record_segment(self, now, finishing):
        duration = self._state.unrecorded_time
        if duration <= 0:
            log.debug(f"Nothing left to record for project '{self._project_id}'")
            return None
        entry = self._recorder.record(
            project_id=self._project_id,
            project_name=self._project_name,
            work_type_id=self._state.work_type_id,
            start_time=now - duration,
            end_time=now,
            duration=duration,
            finishing=finishing,
            time_limit=self._state.time_limit,
        )
        if entry is not None:
            self._state.mark_recorded()
        return entry

    #endregion === Internal helpers ===

    #region === Operations ===

    def load_active_project(self):
        """Restore the server's active project and its local snapshot at session start."""
        try:
            settings = self._api.settings.get()
            project = None
            if settings.active_project_id:
                project = self._api.projects.get(settings.active_project_id)
        except (ApiError, requests.RequestException) as e:
            self._report_error(f"Error loading the active project: {e}")
            return False

        if project is not None:
            self._stop_ticking()
            self._project_id = project.id
            self._project_name = project.name
            self._apply_saved_state(self._persistence.get_project_state(project.id))
            log.info(f"Restored active project '{project.name}' ({project.id})")

        self._recorder.refresh_daily_total()
        self.state_changed.emit()
        return True

    def switch_project(self, new_project_id, new_project_name):
        new_project_id = str(new_project_id)
        if self._project_id == new_project_id:
            return

        now = self._clock()
        if self._project_id is not None:
            # Finish the outgoing segment, then freeze the project as paused. Only the active project may run.
            if self._state.is_running:
                self._state.freeze(now)
                self._record_segment(now, finishing=False)
            self._stop_ticking()
            self._state.demote(now)
            self._persist()
            log.info(f"Switched away from project '{self._project_id}' ({self._state.status.value}, "
                     f"{self._state.elapsed_time}ms)")

        self._project_id = new_project_id
        self._project_name = new_project_name
        self._apply_saved_state(self._persistence.get_project_state(new_project_id))

        try:
            self._api.projects.activate(new_project_id)
        except (ApiError, requests.RequestException) as e:
            self._report_error(f"Error activating project '{new_project_name}': {e}")

        self.state_changed.emit()

    def toggle_timer(self):
        if self._project_id is None:
            self._report_error("Select a project before starting the timer")
            return

        now = self._clock()
        state = self._state
        if state.is_running:
            state.freeze(now)
            if now - state.start_time <= QUICK_TOGGLE_THRESHOLD_MS:
                log.info(f"Quick toggle on project '{self._project_id}' ({now - state.start_time}ms), "
                         f"pausing without recording")
            else:
                self._record_segment(now, finishing=False)
            self._stop_ticking()
            state.pause(now)
            self._status_text = STATUS_PAUSED
        elif state.is_paused:
            state.resume(now)
            self._status_text = STATUS_RESUMED
            self._start_ticking()
        else:
            state.start(now)
            self._status_text = STATUS_RUNNING
            self._notifier.notify_work_start(self._project_name)
            self._start_ticking()

        log.info(f"Timer for project '{self._project_id}' is now {state.status.value}")
        self._persist()
        self.state_changed.emit()

    def finish_task(self):
        # Safe to call twice in a row (auto-stop racing a click): the second call sees idle, or an in-progress finish.
        if self._finishing or self._state.status == TimerStatus.IDLE:
            return

        self._finishing = True
        try:
            now = self._clock()
            self._stop_ticking()
            self._state.freeze(now)
            self._record_segment(now, finishing=True)

            self._state.reset()
            self._state.time_limit = None
            self._status_text = STATUS_READY
            if self._project_id is not None:
                try:
                    self._persistence.clear_project_state(self._project_id)
                except (SnapshotConflictError, OSError) as e:
                    log.error(f"Could not clear timer snapshot for project '{self._project_id}': {e}")
            log.info(f"Finished task on project '{self._project_id}'")
        finally:
            self._finishing = False
        self.state_changed.emit()

    def set_work_type(self, work_type_id, work_type_name=""):
        self._state.work_type_id = str(work_type_id) if work_type_id is not None else None
        self._state.work_type_name = work_type_name if work_type_id is not None else ""
        self._persist()
        self.state_changed.emit()

    # Limit in ms; None or a non-positive value removes it.
    def set_time_limit(self, time_limit):
        self._state.time_limit = int(time_limit) if time_limit and time_limit > 0 else None
        self._persist()
        self.state_changed.emit()

    def tick(self):
        try:
            self._tick()
        except Exception:
            # A raising tick callback would quietly kill every future tick, so log it and carry on
            log.exception(f"Unhandled error in timer tick for project '{self._project_id}'")

    def _tick(self):
        state = self._state
        if not state.is_running:
            self._stop_ticking()
            return

        now = self._clock()
        state.freeze(now)

        crossing = evaluate_marks(state.elapsed_time, state.last_hour_mark, state.last_15min_mark)
        if crossing.hour_fired:
            self._notifier.notify_hour_mark(self._project_name, crossing.hours)
        if crossing.quarter_fired:
            self._notifier.notify_quarter_mark(self._project_name, crossing.minutes)
        state.last_hour_mark = crossing.last_hour_mark
        state.last_15min_mark = crossing.last_15min_mark

        if state.time_limit is not None and state.elapsed_time >= state.time_limit:
            log.info(f"Time limit of {state.time_limit}ms reached on project '{self._project_id}', auto-stopping")
            self._notifier.notify_time_limit_reached(self._project_name, state.time_limit)
            self.finish_task()
            return

        self._persist()
        self.state_changed.emit()

    # Called on app exit. A running timer is saved as running, so it keeps counting while the app is closed.
    def shutdown(self):
        self._stop_ticking()
        self._state.freeze(self._clock())
        self._persist()
        log.info("Project timer shut down")

    #endregion === Operations ===
