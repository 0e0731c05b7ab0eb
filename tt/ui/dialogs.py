"""Login, manual entry, catalog management, today's entries, reports and settings dialogs."""

from datetime import datetime, time
from PySide6.QtCore import Qt, QDate, QDateTime
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDateTimeEdit,
    QDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
)
from tt.api.client import ApiError
from tt.common.logger import log
from tt.core.constants import MS_PER_MINUTE
from tt.core.recorder import EntryValidationError
from tt.util.misc import format_human_readable, format_time


def _error_label():
    label = QLabel("")
    label.setStyleSheet("color: #dc2626;")
    label.setWordWrap(True)
    label.setVisible(False)
    return label

# Yes/No question, defaulting to No.
def _confirm(parent, title, text):
    answer = QMessageBox.question(parent, title, text, QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                  QMessageBox.StandardButton.No)
    return answer == QMessageBox.StandardButton.Yes


# Asks for email/password and authenticates against the API. Accepted once the client holds a token.
class LoginDialog(QDialog):

    def __init__(self, parent, api):
        super().__init__(parent)
        self.setWindowTitle("Sign in")
        self.setModal(True)
        self._api = api
        self.user = None

        outer = QVBoxLayout(self)
        form = QFormLayout()
        self._email = QLineEdit()
        self._email.setPlaceholderText("you@example.com")
        self._password = QLineEdit()
        self._password.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Email", self._email)
        form.addRow("Password", self._password)
        outer.addLayout(form)

        self._error_lbl = _error_label()
        outer.addWidget(self._error_lbl)

        btn_row = QHBoxLayout()
        register_btn = QPushButton("Register")
        register_btn.clicked.connect(lambda: self._submit(register=True))
        login_btn = QPushButton("Sign in")
        login_btn.setDefault(True)
        login_btn.clicked.connect(lambda: self._submit(register=False))
        btn_row.addStretch(1)
        btn_row.addWidget(register_btn)
        btn_row.addWidget(login_btn)
        outer.addLayout(btn_row)

    def _show_error(self, message):
        self._error_lbl.setText(message)
        self._error_lbl.setVisible(True)

    def _submit(self, register):
        email = self._email.text().strip()
        password = self._password.text()
        if not email or not password:
            self._show_error("Email and password are required")
            return
        try:
            if register:
                auth = self._api.auth.register(email, password)
            else:
                auth = self._api.auth.login(email, password)
        except ApiError as e:
            log.warning(f"Authentication failed for {email}: {e.message}")
            self._show_error(e.message)
            return
        self.user = auth.user
        self.accept()


# Hand-entered time entry for the given project. Validation errors are shown inline and keep the dialog open.
class ManualEntryDialog(QDialog):

    def __init__(self, parent, recorder, project_id, project_name, work_types=()):
        super().__init__(parent)
        self.setWindowTitle(f"Add time to {project_name}")
        self.setModal(True)
        self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)
        self._recorder = recorder
        self._project_id = project_id
        self.entry = None

        outer = QVBoxLayout(self)
        form = QFormLayout()
        self._start = QDateTimeEdit(QDateTime.currentDateTime().addSecs(-3600))
        self._start.setCalendarPopup(True)
        self._end = QDateTimeEdit(QDateTime.currentDateTime())
        self._end.setCalendarPopup(True)
        self._work_type = QComboBox()
        self._work_type.addItem("No work type", None)
        for work_type in work_types:
            self._work_type.addItem(work_type.name, work_type.id)
        self._description = QLineEdit()
        form.addRow("Start", self._start)
        form.addRow("End", self._end)
        form.addRow("Work type", self._work_type)
        form.addRow("Description", self._description)
        outer.addLayout(form)

        self._error_lbl = _error_label()
        outer.addWidget(self._error_lbl)

        btn_row = QHBoxLayout()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        save_btn = QPushButton("Save")
        save_btn.setDefault(True)
        save_btn.clicked.connect(self._submit)
        btn_row.addStretch(1)
        btn_row.addWidget(cancel_btn)
        btn_row.addWidget(save_btn)
        outer.addLayout(btn_row)

    def _submit(self):
        try:
            self.entry = self._recorder.record_manual_entry(
                self._project_id,
                self._start.dateTime().toPython(),
                self._end.dateTime().toPython(),
                work_type_id=self._work_type.currentData(),
                description=self._description.text().strip(),
            )
        except (EntryValidationError, ApiError) as e:
            self._error_lbl.setText(str(e))
            self._error_lbl.setVisible(True)
            return
        self.accept()


# ---------------------------------------------------------------------------
# Projects and work types
# ---------------------------------------------------------------------------

# List + edit form for a server-side catalog (projects, work types). Subclasses say how to fetch, create, update and
# delete. `changed` tells the main window to reload its combos once the dialog closes.
class _CatalogDialog(QDialog):

    noun = "item"

    def __init__(self, parent, title, confirm_delete=True):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.setMinimumWidth(360)
        self._confirm_delete = confirm_delete
        self._items = []
        self.changed = False

        outer = QVBoxLayout(self)
        self._list = QListWidget()
        self._list.currentRowChanged.connect(self._on_row_changed)
        outer.addWidget(self._list, 1)

        self._form = QFormLayout()
        self._name = QLineEdit()
        self._description = QLineEdit()
        self._form.addRow("Name", self._name)
        self._form.addRow("Description", self._description)
        outer.addLayout(self._form)

        self._error_lbl = _error_label()
        outer.addWidget(self._error_lbl)

        btn_row = QHBoxLayout()
        add_btn = QPushButton("Add")
        add_btn.clicked.connect(self.add_item)
        save_btn = QPushButton("Save")
        save_btn.clicked.connect(self.save_item)
        self._archive_btn = QPushButton("Archive")
        self._archive_btn.clicked.connect(self.toggle_archived)
        delete_btn = QPushButton("Delete")
        delete_btn.clicked.connect(self.delete_item)
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        for btn in (add_btn, save_btn, self._archive_btn, delete_btn):
            btn_row.addWidget(btn)
        btn_row.addStretch(1)
        btn_row.addWidget(close_btn)
        outer.addLayout(btn_row)

    @property
    def items(self):
        return list(self._items)

    #region === Subclass hooks ===

    def _fetch(self):
        raise NotImplementedError

    def _create(self, fields):
        raise NotImplementedError

    def _update(self, item_id, fields):
        raise NotImplementedError

    def _delete(self, item_id):
        raise NotImplementedError

    # Form contents as snake_case keyword fields.
    def _fields(self):
        return {"name": self._name.text().strip(), "description": self._description.text().strip() or None}

    def _fill(self, item):
        self._name.setText(item.name if item else "")
        self._description.setText((item.description or "") if item else "")

    #endregion === Subclass hooks ===

    def _show_error(self, message):
        self._error_lbl.setText(message)
        self._error_lbl.setVisible(True)

    def _selected(self):
        row = self._list.currentRow()
        return self._items[row] if 0 <= row < len(self._items) else None

    def _select_id(self, item_id):
        for row, item in enumerate(self._items):
            if item.id == item_id:
                self._list.setCurrentRow(row)
                return

    def _on_row_changed(self, _row):
        item = self._selected()
        self._fill(item)
        self._archive_btn.setText("Restore" if item is not None and item.status == "archived" else "Archive")

    def reload(self):
        try:
            self._items = self._fetch()
        except ApiError as e:
            log.error(f"Error loading {self.noun}s: {e.message}")
            self._show_error(e.message)
            return
        self._list.blockSignals(True)
        self._list.clear()
        for item in self._items:
            self._list.addItem(item.name if item.status == "active" else f"{item.name} (archived)")
        self._list.blockSignals(False)
        self._on_row_changed(self._list.currentRow())

    # Runs one API call. Returns the call's result, or None after showing the error.
    def _run(self, action, description):
        try:
            result = action()
        except ApiError as e:
            log.warning(f"{description} failed: {e.message}")
            self._show_error(e.message)
            return None
        log.info(description)
        self._error_lbl.setVisible(False)
        self.changed = True
        self.reload()
        return result

    #region === Actions ===

    def add_item(self):
        fields = self._fields()
        if not fields["name"]:
            self._show_error(f"A {self.noun} needs a name")
            return
        created = self._run(lambda: self._create(fields), f"Created {self.noun} '{fields['name']}'")
        if created is not None:
            self._select_id(created.id)

    def save_item(self):
        item = self._selected()
        if item is None:
            self._show_error(f"Select a {self.noun} first")
            return
        fields = self._fields()
        if not fields["name"]:
            self._show_error(f"A {self.noun} needs a name")
            return
        if self._run(lambda: self._update(item.id, fields), f"Updated {self.noun} '{item.id}'") is not None:
            self._select_id(item.id)

    def toggle_archived(self):
        item = self._selected()
        if item is None:
            self._show_error(f"Select a {self.noun} first")
            return
        status = "active" if item.status == "archived" else "archived"
        if self._run(lambda: self._update(item.id, {"status": status}),
                     f"Set {self.noun} '{item.id}' to {status}") is not None:
            self._select_id(item.id)

    def delete_item(self):
        item = self._selected()
        if item is None:
            self._show_error(f"Select a {self.noun} first")
            return
        if self._confirm_delete and not _confirm(self, f"Delete {self.noun}",
                                                 f"Delete '{item.name}' and all of its time entries?"):
            return
        self._run(lambda: self._delete(item.id), f"Deleted {self.noun} '{item.id}'")

    #endregion === Actions ===


class ProjectsDialog(_CatalogDialog):

    noun = "project"

    def __init__(self, parent, api, confirm_delete=True):
        self._api = api
        super().__init__(parent, "Projects", confirm_delete)
        self.reload()

    def _fetch(self):
        return self._api.projects.list()

    def _create(self, fields):
        return self._api.projects.create(fields["name"], description=fields["description"])

    def _update(self, item_id, fields):
        return self._api.projects.update(item_id, **fields)

    def _delete(self, item_id):
        return self._api.projects.delete(item_id)


# Work types of one project. Adds an optional time goal, in minutes (0 = none).
class WorkTypesDialog(_CatalogDialog):

    noun = "work type"

    def __init__(self, parent, api, project_id, project_name, confirm_delete=True):
        self._api = api
        self._project_id = project_id
        super().__init__(parent, f"Work types for {project_name}", confirm_delete)
        self._goal = QSpinBox()
        self._goal.setRange(0, 24 * 60)
        self._goal.setSuffix(" min")
        self._goal.setSpecialValueText("No goal")
        self._form.addRow("Time goal", self._goal)
        self.reload()

    def _fields(self):
        fields = super()._fields()
        fields["time_goal_ms"] = self._goal.value() * MS_PER_MINUTE or None
        return fields

    def _fill(self, item):
        super()._fill(item)
        self._goal.setValue((item.time_goal_ms or 0) // MS_PER_MINUTE if item else 0)

    def _fetch(self):
        return self._api.work_types.list(self._project_id)

    def _create(self, fields):
        return self._api.work_types.create(self._project_id, fields["name"], description=fields["description"],
                                           time_goal_ms=fields["time_goal_ms"])

    def _update(self, item_id, fields):
        return self._api.work_types.update(item_id, **fields)

    def _delete(self, item_id):
        return self._api.work_types.delete(item_id)


# ---------------------------------------------------------------------------
# Today's entries
# ---------------------------------------------------------------------------

# Today's time entries, newest first. The description can be edited and an entry deleted.
class EntriesDialog(QDialog):

    def __init__(self, parent, api, project_names=None, confirm_delete=True):
        super().__init__(parent)
        self.setWindowTitle("Today's entries")
        self.setModal(True)
        self.setMinimumWidth(520)
        self._api = api
        self._project_names = dict(project_names or {})
        self._confirm_delete = confirm_delete
        self._entries = []
        self.changed = False

        outer = QVBoxLayout(self)
        self._tree = QTreeWidget()
        self._tree.setRootIsDecorated(False)
        self._tree.setHeaderLabels(["From", "To", "Project", "Duration", "Description"])
        self._tree.currentItemChanged.connect(self._on_selection_changed)
        outer.addWidget(self._tree, 1)

        form = QFormLayout()
        self._description = QLineEdit()
        form.addRow("Description", self._description)
        outer.addLayout(form)

        self._error_lbl = _error_label()
        outer.addWidget(self._error_lbl)

        btn_row = QHBoxLayout()
        save_btn = QPushButton("Save description")
        save_btn.clicked.connect(self.save_description)
        delete_btn = QPushButton("Delete")
        delete_btn.clicked.connect(self.delete_entry)
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(save_btn)
        btn_row.addWidget(delete_btn)
        btn_row.addStretch(1)
        btn_row.addWidget(close_btn)
        outer.addLayout(btn_row)

        self.reload()

    @property
    def entries(self):
        return list(self._entries)

    def _show_error(self, message):
        self._error_lbl.setText(message)
        self._error_lbl.setVisible(True)

    def _selected(self):
        row = self._tree.indexOfTopLevelItem(self._tree.currentItem()) if self._tree.currentItem() else -1
        return self._entries[row] if 0 <= row < len(self._entries) else None

    def select_row(self, row):
        self._tree.setCurrentItem(self._tree.topLevelItem(row))

    def _on_selection_changed(self, *_args):
        entry = self._selected()
        self._description.setText((entry.description or "") if entry else "")

    def reload(self):
        try:
            entries = self._api.time_entries.today()
        except ApiError as e:
            log.error(f"Error loading today's entries: {e.message}")
            self._show_error(e.message)
            return
        self._entries = sorted(entries, key=lambda e: e.start_time, reverse=True)
        self._tree.clear()
        for entry in self._entries:
            project = entry.project.name if entry.project else self._project_names.get(entry.project_id,
                                                                                       entry.project_id)
            self._tree.addTopLevelItem(QTreeWidgetItem([
                entry.start_time.astimezone().strftime("%H:%M"),
                entry.end_time.astimezone().strftime("%H:%M"),
                project,
                format_time(entry.duration_ms),
                entry.description or "",
            ]))

    def _after_change(self, message):
        log.info(message)
        self._error_lbl.setVisible(False)
        self.changed = True
        self.reload()

    def save_description(self):
        entry = self._selected()
        if entry is None:
            self._show_error("Select an entry first")
            return
        try:
            self._api.time_entries.update(entry.id, description=self._description.text().strip() or None)
        except ApiError as e:
            self._show_error(e.message)
            return
        self._after_change(f"Updated description of entry '{entry.id}'")

    def delete_entry(self):
        entry = self._selected()
        if entry is None:
            self._show_error("Select an entry first")
            return
        if self._confirm_delete and not _confirm(self, "Delete entry",
                                                 f"Delete the {format_time(entry.duration_ms)} entry?"):
            return
        try:
            self._api.time_entries.delete(entry.id)
        except ApiError as e:
            self._show_error(e.message)
            return
        self._after_change(f"Deleted entry '{entry.id}'")


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

REPORT_PERIODS = (
    ("This week", "week"),
    ("This month", "month"),
    ("This quarter", "quarter"),
    ("Custom range", "custom"),
)

# Per-project totals for a period, with each project's work types as children.
class ReportsDialog(QDialog):

    def __init__(self, parent, reports):
        super().__init__(parent)
        self.setWindowTitle("Reports")
        self.setMinimumSize(480, 360)
        self._reports = reports
        self.report = None

        outer = QVBoxLayout(self)
        controls = QHBoxLayout()
        self._period = QComboBox()
        for label, period in REPORT_PERIODS:
            self._period.addItem(label, period)
        self._start = QDateEdit(QDate.currentDate().addDays(-6))
        self._start.setCalendarPopup(True)
        self._end = QDateEdit(QDate.currentDate())
        self._end.setCalendarPopup(True)
        refresh_btn = QPushButton("Refresh")
        refresh_btn.clicked.connect(self.load)
        controls.addWidget(self._period)
        controls.addWidget(self._start)
        controls.addWidget(QLabel("to"))
        controls.addWidget(self._end)
        controls.addStretch(1)
        controls.addWidget(refresh_btn)
        outer.addLayout(controls)

        self._total_lbl = QLabel("")
        outer.addWidget(self._total_lbl)

        self._tree = QTreeWidget()
        self._tree.setHeaderLabels(["Project / work type", "Time", "Share", "Entries"])
        outer.addWidget(self._tree, 1)

        self._error_lbl = _error_label()
        outer.addWidget(self._error_lbl)

        close_row = QHBoxLayout()
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        close_row.addStretch(1)
        close_row.addWidget(close_btn)
        outer.addLayout(close_row)

        self._set_custom_enabled()
        self._period.currentIndexChanged.connect(self._on_period_changed)
        self.load()

    def set_period(self, period):
        self._period.setCurrentIndex(self._period.findData(period))

    def set_custom_range(self, start_day, end_day):
        self._start.setDate(QDate(start_day.year, start_day.month, start_day.day))
        self._end.setDate(QDate(end_day.year, end_day.month, end_day.day))

    def _set_custom_enabled(self):
        custom = self._period.currentData() == "custom"
        self._start.setEnabled(custom)
        self._end.setEnabled(custom)

    def _on_period_changed(self, _index):
        self._set_custom_enabled()
        self.load()

    # Local-midnight bounds of the picked dates, only for a custom range.
    def _custom_bounds(self):
        if self._period.currentData() != "custom":
            return None, None
        tzinfo = datetime.now().astimezone().tzinfo
        start = datetime.combine(self._start.date().toPython(), time.min, tzinfo=tzinfo)
        end = datetime.combine(self._end.date().toPython(), time(23, 59, 59, 999000), tzinfo=tzinfo)
        return start, end

    def load(self):
        period = self._period.currentData()
        start, end = self._custom_bounds()
        if start is not None and end < start:
            self._show_error("The end date is before the start date")
            return
        try:
            try:
                report = self._reports.get_report(period, start, end)
            except ApiError as e:
                if e.status_code != 404:
                    raise
                log.info("Server has no report route, building the report from time entries")
                report = self._reports.build_local_report(period, start_date=start, end_date=end)
        except ApiError as e:
            log.error(f"Error loading {period} report: {e.message}")
            self._show_error(e.message)
            return
        self._error_lbl.setVisible(False)
        self.report = report
        self._render(report)

    def _show_error(self, message):
        self._error_lbl.setText(message)
        self._error_lbl.setVisible(True)

    def _render(self, report):
        start = report.start_date.astimezone()
        end = report.end_date.astimezone()
        self._total_lbl.setText(f"Total: {format_human_readable(report.total_duration)}   "
                                f"({start:%b %d} - {end:%b %d, %Y})")
        self._tree.clear()
        for summary in report.project_summaries:
            project_item = QTreeWidgetItem([
                summary.project.name,
                format_human_readable(summary.total_duration),
                f"{summary.percentage}%",
                str(summary.entries_count),
            ])
            project_item.setForeground(0, QBrush(QColor(summary.project.color)))
            for work_type in summary.work_types:
                project_item.addChild(QTreeWidgetItem([
                    work_type.work_type.name,
                    format_human_readable(work_type.duration),
                    f"{work_type.percentage}%",
                    str(work_type.entries_count),
                ]))
            self._tree.addTopLevelItem(project_item)
        self._tree.expandAll()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

# Server-side user settings plus the local toggles. Output attributes are read by MainWindow after the dialog is
# accepted: chosen_* for settings.json, server_settings for what the API now holds.
class SettingsDialog(QDialog):

    def __init__(self, parent, api, cfg):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setModal(True)
        self._api = api
        self._confirm_delete = cfg.get("confirm_delete", True)

        self.chosen_sound_notifications = cfg.get("sound_notifications", True)
        self.chosen_system_notifications = cfg.get("system_notifications", True)
        self.chosen_always_on_top = cfg.get("always_on_top", False)
        self.chosen_confirm_delete = self._confirm_delete
        self.server_settings = None

        outer = QVBoxLayout(self)

        # -- Server settings --
        server_box = QGroupBox("Account")
        server_form = QFormLayout(server_box)
        self._work_spin = QSpinBox()
        self._work_spin.setRange(1, 60)
        self._work_spin.setSuffix(" min")
        self._rest_spin = QSpinBox()
        self._rest_spin.setRange(1, 30)
        self._rest_spin.setSuffix(" min")
        self._retention_spin = QSpinBox()
        self._retention_spin.setRange(1, 36)
        self._retention_spin.setSuffix(" months")
        self._cleanup_btn = QPushButton("Delete entries older than that")
        self._cleanup_btn.clicked.connect(self.cleanup)
        server_form.addRow("Pomodoro work", self._work_spin)
        server_form.addRow("Pomodoro rest", self._rest_spin)
        server_form.addRow("Keep entries for", self._retention_spin)
        server_form.addRow("", self._cleanup_btn)
        outer.addWidget(server_box)

        # -- Local settings --
        local_box = QGroupBox("This computer")
        local_lay = QVBoxLayout(local_box)
        self._sound_cb = QCheckBox("Play sounds")
        self._sound_cb.setChecked(self.chosen_sound_notifications)
        self._system_cb = QCheckBox("Show system notifications")
        self._system_cb.setChecked(self.chosen_system_notifications)
        self._on_top_cb = QCheckBox("Keep window on top")
        self._on_top_cb.setChecked(self.chosen_always_on_top)
        self._confirm_cb = QCheckBox("Confirm before deleting")
        self._confirm_cb.setChecked(self.chosen_confirm_delete)
        for cb in (self._sound_cb, self._system_cb, self._on_top_cb, self._confirm_cb):
            local_lay.addWidget(cb)
        outer.addWidget(local_box)

        self._status_lbl = QLabel("")
        self._status_lbl.setVisible(False)
        outer.addWidget(self._status_lbl)
        self._error_lbl = _error_label()
        outer.addWidget(self._error_lbl)

        btn_row = QHBoxLayout()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        apply_btn = QPushButton("Apply")
        apply_btn.setDefault(True)
        apply_btn.clicked.connect(self.apply)
        btn_row.addStretch(1)
        btn_row.addWidget(cancel_btn)
        btn_row.addWidget(apply_btn)
        outer.addLayout(btn_row)

        self._load_server_settings()

    def _show_error(self, message):
        self._error_lbl.setText(message)
        self._error_lbl.setVisible(True)

    def _load_server_settings(self):
        try:
            self._loaded = self._api.settings.get()
        except ApiError as e:
            log.error(f"Error loading user settings: {e.message}")
            self._loaded = None
            self._show_error(f"Account settings unavailable: {e.message}")
            for widget in (self._work_spin, self._rest_spin, self._retention_spin, self._cleanup_btn):
                widget.setEnabled(False)
            return
        self._work_spin.setValue(self._loaded.pomodoro_work_time)
        self._rest_spin.setValue(self._loaded.pomodoro_rest_time)
        self._retention_spin.setValue(self._loaded.data_retention_period)

    def cleanup(self):
        if self._confirm_delete and not _confirm(self, "Delete old entries",
                                                 "Delete every entry older than the saved retention period?"):
            return
        try:
            self._api.settings.cleanup()
        except ApiError as e:
            self._show_error(e.message)
            return
        log.info("Old time entries cleaned up")
        self._status_lbl.setText("Old entries deleted")
        self._status_lbl.setVisible(True)

    def apply(self):
        if self._loaded is not None:
            updated = self._loaded.model_copy(update={
                "pomodoro_work_time": self._work_spin.value(),
                "pomodoro_rest_time": self._rest_spin.value(),
                "data_retention_period": self._retention_spin.value(),
            })
            try:
                self.server_settings = self._api.settings.update(updated)
            except ApiError as e:
                log.warning(f"Saving user settings failed: {e.message}")
                self._show_error(e.message)
                return

        self.chosen_sound_notifications = self._sound_cb.isChecked()
        self.chosen_system_notifications = self._system_cb.isChecked()
        self.chosen_always_on_top = self._on_top_cb.isChecked()
        self.chosen_confirm_delete = self._confirm_cb.isChecked()
        self.accept()
