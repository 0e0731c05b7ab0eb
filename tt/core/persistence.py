"""Snapshot persistence for project timers and the pomodoro timer.

Project timers are stored as one versioned blob under a single key, and every
change rewrites the whole map. The version counter turns the old silent
last-write-wins race between two running instances into an explicit
SnapshotConflictError.
"""

import json
from dataclasses import dataclass, field
from tt.common.logger import log
from tt.core.constants import TIMER_STATES_STORAGE_KEY, POMODORO_STATE_STORAGE_KEY
from tt.core.pomodoro import PomodoroState
from tt.core.timer_state import ProjectTimerState


class SnapshotConflictError(RuntimeError):
    pass


@dataclass
class SnapshotMap:
    states: dict = field(default_factory=dict)
    version: int = 0


class TimerPersistence:

    def __init__(self, store, key=TIMER_STATES_STORAGE_KEY):
        self._store = store
        self._key = key

    @staticmethod
    def default_state():
        return ProjectTimerState()

    # Parses the raw blob into (version, {project_id: raw_state}). Anything unreadable becomes an empty map.
    def _read_raw(self):
        raw = self._store.get_item(self._key)
        if raw is None:
            return 0, {}
        try:
            blob = json.loads(raw)
        except json.JSONDecodeError:
            log.warning(f"Timer snapshot blob under '{self._key}' is not valid JSON, starting from an empty map.")
            return 0, {}
        if not isinstance(blob, dict):
            log.warning(f"Timer snapshot blob under '{self._key}' is not an object, starting from an empty map.")
            return 0, {}

        # Legacy shape written by the web client: a bare {projectId: state} mapping with no version
        if "states" not in blob or not isinstance(blob.get("states"), dict):
            return 0, blob

        version = blob.get("version", 0)
        if isinstance(version, bool) or not isinstance(version, int):
            version = 0
        return version, blob["states"]

    def load(self):
        version, raw_states = self._read_raw()
        states = {}
        dropped = []
        for project_id, raw_state in raw_states.items():
            try:
                states[str(project_id)] = ProjectTimerState.from_dict(raw_state)
            except ValueError:
                dropped.append(str(project_id))
        if dropped:
            log.warning(f"Dropped unreadable timer snapshots for projects: {', '.join(sorted(dropped))}")
        return SnapshotMap(states=states, version=version)

    # Writes the full map. With check_version, a map loaded before someone else's write is refused.
    def save(self, snapshot_map, check_version=True):
        if check_version:
            stored_version, _ = self._read_raw()
            if stored_version != snapshot_map.version:
                raise SnapshotConflictError(
                    f"Timer snapshots changed underneath us (have version {snapshot_map.version}, "
                    f"store has {stored_version})"
                )
        new_version = snapshot_map.version + 1
        blob = {
            "version": new_version,
            "states": {pid: state.to_dict() for pid, state in snapshot_map.states.items()},
        }
        self._store.set_item(self._key, json.dumps(blob))
        snapshot_map.version = new_version

    # Loads, applies mutate(snapshot_map), saves. One retry covers a write that slipped in between load and save.
    def _update(self, mutate):
        for attempt in range(2):
            snapshot_map = self.load()
            mutate(snapshot_map)
            try:
                self.save(snapshot_map)
                return
            except SnapshotConflictError:
                if attempt:
                    raise
                log.warning("Timer snapshot conflict, reloading and retrying once.")

    def get_project_state(self, project_id):
        state = self.load().states.get(str(project_id))
        return state.copy() if state is not None else None

    def save_project_state(self, project_id, state):
        def mutate(snapshot_map):
            snapshot_map.states[str(project_id)] = state.copy()
        self._update(mutate)

    def clear_project_state(self, project_id):
        def mutate(snapshot_map):
            snapshot_map.states.pop(str(project_id), None)
        self._update(mutate)


class PomodoroPersistence:
    """Single pomodoro snapshot under its own key. Never raises into the caller."""

    def __init__(self, store, key=POMODORO_STATE_STORAGE_KEY):
        self._store = store
        self._key = key

    def load(self):
        try:
            raw = self._store.get_item(self._key)
            if raw is None:
                return None
            return PomodoroState.from_dict(json.loads(raw))
        except (OSError, ValueError):
            log.error("Error loading pomodoro state, ignoring the saved copy.", exc_info=True)
            return None

    def save(self, state):
        try:
            self._store.set_item(self._key, json.dumps(state.to_dict()))
        except (OSError, TypeError, ValueError):
            log.error("Error saving pomodoro state.", exc_info=True)

    def clear(self):
        try:
            self._store.remove_item(self._key)
        except OSError:
            log.error("Error clearing pomodoro state.", exc_info=True)
