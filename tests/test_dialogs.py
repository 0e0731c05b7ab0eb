"""Tests for the management, entries, reports and settings dialogs.

Covers: tt.ui.dialogs
"""

import unittest
from datetime import date, datetime, timezone
from fakes import FakeApi, qt_app


def _entry(entry_id, project_id, start_hour, minutes, work_type_id=None, description=None):
    from tt.api.schemas import TimeEntry
    start = datetime(2024, 5, 15, start_hour, 0, tzinfo=timezone.utc)
    end = datetime(2024, 5, 15, start_hour, minutes, tzinfo=timezone.utc) if minutes < 60 else \
        datetime(2024, 5, 15, start_hour + 1, 0, tzinfo=timezone.utc)
    return TimeEntry(id=entry_id, project_id=project_id, work_type_id=work_type_id, start_time=start,
                     end_time=end, duration_ms=minutes * 60 * 1000, description=description)


class DialogTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls._app = qt_app()

    def setUp(self):
        self.api = FakeApi()

    def assert_error_shown(self, dialog):
        self.assertFalse(dialog._error_lbl.isHidden())
        self.assertTrue(dialog._error_lbl.text())


class TestProjectsDialog(DialogTestCase):

    def make_dialog(self):
        from tt.ui.dialogs import ProjectsDialog
        return ProjectsDialog(None, self.api, confirm_delete=False)

    def names(self, dialog):
        return [dialog._list.item(row).text() for row in range(dialog._list.count())]

    def test_lists_projects(self):
        dialog = self.make_dialog()
        self.assertEqual(self.names(dialog), ["Alpha", "Beta"])
        self.assertFalse(dialog.changed)

    def test_add_project(self):
        dialog = self.make_dialog()
        dialog._name.setText("Gamma")
        dialog._description.setText("Client work")
        dialog.add_item()
        self.assertEqual(self.names(dialog), ["Alpha", "Beta", "Gamma"])
        self.assertEqual(self.api.projects.get("p3").description, "Client work")
        self.assertEqual(dialog._selected().id, "p3")
        self.assertTrue(dialog.changed)

    def test_add_without_name_is_refused(self):
        dialog = self.make_dialog()
        dialog._name.setText("   ")
        dialog.add_item()
        self.assert_error_shown(dialog)
        self.assertEqual(len(self.api.projects.list()), 2)
        self.assertFalse(dialog.changed)

    def test_rename_project(self):
        dialog = self.make_dialog()
        dialog._list.setCurrentRow(0)
        self.assertEqual(dialog._name.text(), "Alpha")
        dialog._name.setText("Alpha 2")
        dialog.save_item()
        self.assertEqual(self.api.projects.get("p1").name, "Alpha 2")
        self.assertEqual(self.names(dialog)[0], "Alpha 2")

    def test_archive_and_restore(self):
        dialog = self.make_dialog()
        dialog._list.setCurrentRow(1)
        dialog.toggle_archived()
        self.assertEqual(self.api.projects.get("p2").status, "archived")
        self.assertEqual(self.names(dialog)[1], "Beta (archived)")
        self.assertEqual(dialog._archive_btn.text(), "Restore")

        dialog.toggle_archived()
        self.assertEqual(self.api.projects.get("p2").status, "active")

    def test_delete_project(self):
        dialog = self.make_dialog()
        dialog._list.setCurrentRow(1)
        dialog.delete_item()
        self.assertEqual(self.names(dialog), ["Alpha"])

    def test_actions_need_a_selection(self):
        dialog = self.make_dialog()
        dialog.delete_item()
        self.assert_error_shown(dialog)
        self.assertEqual(len(self.api.projects.list()), 2)

    def test_api_failure_is_shown_inline(self):
        dialog = self.make_dialog()
        self.api.projects.fail_writes = True
        dialog._name.setText("Alpha")
        dialog.add_item()
        self.assertEqual(dialog._error_lbl.text(), "Name already taken")
        self.assertFalse(dialog.changed)


class TestWorkTypesDialog(DialogTestCase):

    def setUp(self):
        from tt.api.schemas import WorkType
        self.api = FakeApi(work_types=[WorkType(id="wt1", project_id="p1", name="Design", time_goal_ms=1800000),
                                       WorkType(id="wt2", project_id="p2", name="Support")])

    def make_dialog(self):
        from tt.ui.dialogs import WorkTypesDialog
        return WorkTypesDialog(None, self.api, "p1", "Alpha", confirm_delete=False)

    def test_lists_only_the_projects_work_types(self):
        dialog = self.make_dialog()
        self.assertEqual([wt.id for wt in dialog.items], ["wt1"])
        dialog._list.setCurrentRow(0)
        self.assertEqual(dialog._goal.value(), 30)

    def test_add_with_time_goal(self):
        dialog = self.make_dialog()
        dialog._name.setText("Review")
        dialog._goal.setValue(45)
        dialog.add_item()
        created = [wt for wt in self.api.work_types.list("p1") if wt.name == "Review"][0]
        self.assertEqual(created.time_goal_ms, 45 * 60 * 1000)
        self.assertEqual(created.project_id, "p1")

    def test_clearing_goal_sends_none(self):
        dialog = self.make_dialog()
        dialog._list.setCurrentRow(0)
        dialog._goal.setValue(0)
        dialog.save_item()
        self.assertIsNone(self.api.work_types.list("p1")[0].time_goal_ms)

    def test_delete(self):
        dialog = self.make_dialog()
        dialog._list.setCurrentRow(0)
        dialog.delete_item()
        self.assertEqual(dialog.items, [])
        self.assertEqual(len(self.api.work_types.list("p2")), 1)


class TestEntriesDialog(DialogTestCase):

    def setUp(self):
        super().setUp()
        self.api.time_entries.today_entries = [_entry("e1", "p1", 9, 60), _entry("e2", "p2", 11, 30)]

    def make_dialog(self):
        from tt.ui.dialogs import EntriesDialog
        return EntriesDialog(None, self.api, {"p1": "Alpha", "p2": "Beta"}, confirm_delete=False)

    def test_newest_first(self):
        dialog = self.make_dialog()
        self.assertEqual([e.id for e in dialog.entries], ["e2", "e1"])
        row = dialog._tree.topLevelItem(0)
        self.assertEqual(row.text(2), "Beta")
        self.assertEqual(row.text(3), "00:30:00")

    def test_edit_description(self):
        dialog = self.make_dialog()
        dialog.select_row(1)
        dialog._description.setText("Planning")
        dialog.save_description()
        self.assertEqual(self.api.time_entries.updated, [("e1", {"description": "Planning"})])
        self.assertTrue(dialog.changed)
        self.assertEqual(dialog._tree.topLevelItem(1).text(4), "Planning")

    def test_delete_entry(self):
        dialog = self.make_dialog()
        dialog.select_row(0)
        dialog.delete_entry()
        self.assertEqual([e.id for e in self.api.time_entries.today_entries], ["e1"])
        self.assertEqual(dialog._tree.topLevelItemCount(), 1)

    def test_failure_keeps_entries(self):
        dialog = self.make_dialog()
        dialog.select_row(0)
        self.api.time_entries.fail = True
        dialog.delete_entry()
        self.assert_error_shown(dialog)
        self.assertFalse(dialog.changed)
        self.assertEqual(len(self.api.time_entries.today_entries), 2)


class TestReportsDialog(DialogTestCase):

    def setUp(self):
        super().setUp()
        from tt.core.reports import summarize_entries
        self.entries = [_entry("e1", "p1", 9, 60, work_type_id="wt1"), _entry("e2", "p1", 11, 30),
                        _entry("e3", "p2", 13, 30)]
        start = datetime(2024, 5, 13, tzinfo=timezone.utc)
        end = datetime(2024, 5, 19, 23, 59, tzinfo=timezone.utc)
        self.api.reports.report = summarize_entries(self.entries, start, end)

    def make_dialog(self):
        from tt.ui.dialogs import ReportsDialog
        from tt.core.reports import ReportService
        return ReportsDialog(None, ReportService(self.api))

    def test_loads_weekly_report_with_breakdown(self):
        dialog = self.make_dialog()
        self.assertEqual(self.api.reports.calls, [("week", None, None)])
        self.assertEqual(dialog._tree.topLevelItemCount(), 2)
        alpha = dialog._tree.topLevelItem(0)
        self.assertEqual(alpha.text(1), "1h 30m")
        self.assertEqual(alpha.text(2), "75%")
        self.assertEqual(alpha.childCount(), 2)
        self.assertEqual(alpha.child(1).text(0), "Uncategorized")
        self.assertIn("2h 00m", dialog._total_lbl.text())

    def test_period_change_reloads(self):
        dialog = self.make_dialog()
        dialog.set_period("quarter")
        self.assertEqual(self.api.reports.calls[-1], ("quarter", None, None))
        self.assertFalse(dialog._start.isEnabled())

    def test_custom_range_sends_local_day_bounds(self):
        dialog = self.make_dialog()
        dialog.set_custom_range(date(2024, 5, 1), date(2024, 5, 10))
        dialog.set_period("custom")
        period, start, end = self.api.reports.calls[-1]
        self.assertEqual(period, "custom")
        self.assertEqual((start.year, start.month, start.day, start.hour), (2024, 5, 1, 0))
        self.assertEqual((end.month, end.day, end.hour, end.minute), (5, 10, 23, 59))
        self.assertIsNotNone(start.tzinfo)
        self.assertTrue(dialog._start.isEnabled())

    def test_inverted_custom_range_is_refused(self):
        dialog = self.make_dialog()
        dialog.set_custom_range(date(2024, 5, 10), date(2024, 5, 1))
        calls = len(self.api.reports.calls)
        dialog.set_period("custom")
        self.assertEqual(len(self.api.reports.calls), calls)
        self.assert_error_shown(dialog)

    def test_missing_report_route_builds_locally(self):
        self.api.reports.status_code = 404
        self.api.time_entries.today_entries = list(self.entries)
        dialog = self.make_dialog()
        self.assertEqual(dialog.report.total_duration, 120 * 60 * 1000)
        self.assertEqual(dialog._tree.topLevelItemCount(), 2)

    def test_server_error_is_shown(self):
        self.api.reports.status_code = 500
        dialog = self.make_dialog()
        self.assertIsNone(dialog.report)
        self.assert_error_shown(dialog)


class TestSettingsDialog(DialogTestCase):

    def make_dialog(self, **overrides):
        from tt.core.config import build_default_settings
        from tt.ui.dialogs import SettingsDialog
        cfg = build_default_settings()
        cfg.update(overrides)
        return SettingsDialog(None, self.api, cfg)

    def test_loads_server_values(self):
        dialog = self.make_dialog()
        self.assertEqual(dialog._work_spin.value(), 25)
        self.assertEqual(dialog._rest_spin.value(), 5)
        self.assertEqual(dialog._retention_spin.value(), 3)

    def test_apply_saves_server_and_local_settings(self):
        dialog = self.make_dialog()
        dialog._work_spin.setValue(50)
        dialog._retention_spin.setValue(12)
        dialog._sound_cb.setChecked(False)
        dialog._on_top_cb.setChecked(True)
        dialog.apply()

        self.assertEqual(self.api.settings.current.pomodoro_work_time, 50)
        self.assertEqual(self.api.settings.current.data_retention_period, 12)
        self.assertEqual(dialog.server_settings.pomodoro_work_time, 50)
        self.assertFalse(dialog.chosen_sound_notifications)
        self.assertTrue(dialog.chosen_always_on_top)

    def test_cleanup(self):
        dialog = self.make_dialog(confirm_delete=False)
        dialog.cleanup()
        self.assertEqual(self.api.settings.cleanups, 1)
        self.assertFalse(dialog._status_lbl.isHidden())

    def test_unreachable_server_still_applies_local_settings(self):
        self.api.settings.fail = True
        dialog = self.make_dialog()
        self.assertFalse(dialog._work_spin.isEnabled())
        self.assert_error_shown(dialog)
        dialog._system_cb.setChecked(False)
        dialog.apply()
        self.assertIsNone(dialog.server_settings)
        self.assertFalse(dialog.chosen_system_notifications)


if __name__ == "__main__":
    unittest.main()
