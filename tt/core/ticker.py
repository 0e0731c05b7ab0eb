from PySide6.QtCore import QTimer
from tt.common.logger import log
from tt.core.constants import TICK_INTERVAL_MS


# Repeating 1 s tick owned by a timer model (never by a widget). At most one QTimer exists per driver, and start()
# while already active just swaps the callback.
class QtTickDriver:

    def __init__(self, interval_ms=TICK_INTERVAL_MS, parent=None):
        self._timer = QTimer(parent)
        self._timer.setInterval(interval_ms)
        self._callback = None
        self._timer.timeout.connect(self._fire)

    @property
    def is_active(self):
        return self._timer.isActive()

    def start(self, callback):
        self._callback = callback
        if not self._timer.isActive():
            self._timer.start()
            log.debug(f"Tick driver started ({self._timer.interval()} ms)")

    def stop(self):
        if self._timer.isActive():
            self._timer.stop()
            log.debug("Tick driver stopped")
        self._callback = None

    def _fire(self):
        if self._callback is not None:
            self._callback()
