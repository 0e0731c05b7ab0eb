"""Tests for the QTimer-backed tick driver.

Covers: tt.core.ticker
"""

import unittest
from fakes import qt_app


class TestQtTickDriver(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls._app = qt_app()

    def test_start_stop(self):
        from tt.core.ticker import QtTickDriver
        driver = QtTickDriver(interval_ms=1000)
        self.assertFalse(driver.is_active)
        driver.start(lambda: None)
        self.assertTrue(driver.is_active)
        driver.stop()
        self.assertFalse(driver.is_active)

    def test_restart_swaps_callback(self):
        from tt.core.ticker import QtTickDriver
        calls = []
        driver = QtTickDriver(interval_ms=1000)
        driver.start(lambda: calls.append("first"))
        driver.start(lambda: calls.append("second"))
        driver._fire()
        self.assertEqual(calls, ["second"])
        driver.stop()

    def test_fire_after_stop_is_ignored(self):
        from tt.core.ticker import QtTickDriver
        calls = []
        driver = QtTickDriver(interval_ms=1000)
        driver.start(lambda: calls.append(1))
        driver.stop()
        driver._fire()
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main()
