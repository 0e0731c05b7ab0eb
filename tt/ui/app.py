import sys
import requests
from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QStyle,
    QSystemTrayIcon,
    QVBoxLayout,
    QWidget,
)
from tt.api.client import ApiClient, ApiError, UnauthorizedError
from tt.common.logger import enable_console_logging, log
from tt.core import config
from tt.core.constants import MS_PER_MINUTE
from tt.core.notifications import Notifier
from tt.core.persistence import PomodoroPersistence, TimerPersistence
from tt.core.pomodoro import MODE_WORK, PomodoroTimer
from tt.core.recorder import EntryRecorder
from tt.core.reports import ReportService
from tt.core.storage import JsonFileStore
from tt.core.timer import ProjectTimer
from tt.ui.dialogs import (
    EntriesDialog,
    LoginDialog,
    ManualEntryDialog,
    ProjectsDialog,
    ReportsDialog,
    SettingsDialog,
    WorkTypesDialog,
)
from tt.ui.notify_backends import QtAudioPlayer, TrayNotifier
from tt.util.misc import format_human_readable


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

# Main window of the project timer. Renders the active project's timer and the pomodoro, all logic lives in the models.
class MainWindow(QMainWindow):

    def __init__(self, settings, api, store):
        super().__init__()
        self.setWindowTitle("Project Timer")
        self.settings = settings
        self.api = api

        if settings["always_on_top"]:
            self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)

        # -- Tray icon, doubles as the system notification backend --
        icon = self.style().standardIcon(QStyle.StandardPixmap.SP_BrowserReload)
        self.setWindowIcon(icon)
        self._tray = QSystemTrayIcon(icon, self)
        self._tray.setToolTip("Project Timer")
        if QSystemTrayIcon.isSystemTrayAvailable():
            self._tray.show()

        # -- Models --
        self.notifier = Notifier(
            audio=QtAudioPlayer(parent=self),
            system=TrayNotifier(self._tray),
            sound_enabled=settings["sound_notifications"],
            system_enabled=settings["system_notifications"],
        )
        self.recorder = EntryRecorder(api, self.notifier, test_mode=settings["test_mode"])
        self.timer = ProjectTimer(api, TimerPersistence(store), self.recorder, self.notifier, parent=self)
        self.pomodoro = PomodoroTimer(PomodoroPersistence(store), self.notifier, parent=self)
        self.reports = ReportService(api)
        self._work_types = []
        self._project_names = {}

        # -- Build UI --
        central = QWidget()
        self.setCentralWidget(central)
        main_lay = QVBoxLayout(central)
        main_lay.addLayout(self._build_project_row())
        main_lay.addLayout(self._build_tools_row())
        main_lay.addLayout(self._build_timer_section())
        main_lay.addWidget(self._build_separator())
        main_lay.addLayout(self._build_pomodoro_section())

        self.timer.state_changed.connect(self._refresh_timer)
        self.timer.error_occurred.connect(self._on_error)
        self.pomodoro.state_changed.connect(self._refresh_pomodoro)

        self._refresh_timer()
        self._refresh_pomodoro()
        QTimer.singleShot(0, self._bootstrap)

    # ------------------------------------------------------------------ #
    #  Layout                                                              #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build_separator():
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFrameShadow(QFrame.Shadow.Sunken)
        return line

    def _build_project_row(self):
        row = QHBoxLayout()
        self._project_combo = QComboBox()
        self._project_combo.setMinimumWidth(180)
        self._project_combo.currentIndexChanged.connect(self._on_project_selected)
        self._work_type_combo = QComboBox()
        self._work_type_combo.currentIndexChanged.connect(self._on_work_type_selected)
        logout_btn = QPushButton("Sign out")
        logout_btn.clicked.connect(self._on_logout)
        row.addWidget(QLabel("Project"))
        row.addWidget(self._project_combo, 1)
        row.addWidget(QLabel("Work type"))
        row.addWidget(self._work_type_combo, 1)
        row.addWidget(logout_btn)
        return row

    def _build_tools_row(self):
        row = QHBoxLayout()
        for label, handler in (("Projects...", self._on_manage_projects),
                               ("Work types...", self._on_manage_work_types),
                               ("Today...", self._on_show_entries),
                               ("Reports...", self._on_show_reports),
                               ("Settings...", self._on_settings)):
            btn = QPushButton(label)
            btn.clicked.connect(handler)
            row.addWidget(btn)
        row.addStretch(1)
        return row

    def _build_timer_section(self):
        lay = QVBoxLayout()

        self._time_lbl = QLabel(self.timer.timer_value)
        self._time_lbl.setFont(QFont("Consolas", 32, QFont.Weight.Bold))
        self._time_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        lay.addWidget(self._time_lbl)

        self._status_lbl = QLabel("")
        self._status_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        lay.addWidget(self._status_lbl)

        btn_row = QHBoxLayout()
        self._toggle_btn = QPushButton("Start")
        self._toggle_btn.clicked.connect(self.timer.toggle_timer)
        self._finish_btn = QPushButton("Finish")
        self._finish_btn.clicked.connect(self.timer.finish_task)
        manual_btn = QPushButton("Add time...")
        manual_btn.clicked.connect(self._on_manual_entry)
        btn_row.addWidget(self._toggle_btn)
        btn_row.addWidget(self._finish_btn)
        btn_row.addWidget(manual_btn)
        lay.addLayout(btn_row)

        limit_row = QHBoxLayout()
        self._limit_spin = QSpinBox()
        self._limit_spin.setRange(0, 24 * 60)
        self._limit_spin.setSuffix(" min")
        self._limit_spin.setSpecialValueText("No limit")
        self._limit_spin.valueChanged.connect(self._on_limit_changed)
        self._daily_lbl = QLabel("")
        limit_row.addWidget(QLabel("Time limit"))
        limit_row.addWidget(self._limit_spin)
        limit_row.addStretch(1)
        limit_row.addWidget(self._daily_lbl)
        lay.addLayout(limit_row)
        return lay

    def _build_pomodoro_section(self):
        lay = QVBoxLayout()
        header = QHBoxLayout()
        self._pomo_mode_lbl = QLabel("")
        self._pomo_cycles_lbl = QLabel("")
        header.addWidget(self._pomo_mode_lbl)
        header.addStretch(1)
        header.addWidget(self._pomo_cycles_lbl)
        lay.addLayout(header)

        self._pomo_time_lbl = QLabel("")
        self._pomo_time_lbl.setFont(QFont("Consolas", 20))
        self._pomo_time_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        lay.addWidget(self._pomo_time_lbl)

        btn_row = QHBoxLayout()
        self._pomo_toggle_btn = QPushButton("Start")
        self._pomo_toggle_btn.clicked.connect(self._on_pomodoro_toggle)
        reset_btn = QPushButton("Reset")
        reset_btn.clicked.connect(self.pomodoro.reset)
        self._work_spin = QSpinBox()
        self._work_spin.setRange(1, 180)
        self._work_spin.setSuffix(" min work")
        self._work_spin.setValue(self.pomodoro.work_duration)
        self._work_spin.valueChanged.connect(self.pomodoro.set_work_duration)
        self._rest_spin = QSpinBox()
        self._rest_spin.setRange(1, 60)
        self._rest_spin.setSuffix(" min rest")
        self._rest_spin.setValue(self.pomodoro.rest_duration)
        self._rest_spin.valueChanged.connect(self.pomodoro.set_rest_duration)
        btn_row.addWidget(self._pomo_toggle_btn)
        btn_row.addWidget(reset_btn)
        btn_row.addWidget(self._work_spin)
        btn_row.addWidget(self._rest_spin)
        lay.addLayout(btn_row)
        return lay

    # ------------------------------------------------------------------ #
    #  Startup                                                             #
    # ------------------------------------------------------------------ #

    def _bootstrap(self):
        if not self._ensure_logged_in():
            self.close()
            return
        self._load_projects()
        self.timer.load_active_project()
        self._select_project_in_combo(self.timer.project_id)
        if self.timer.project_id:
            self._load_work_types(self.timer.project_id)

        try:
            self.pomodoro.apply_settings(self.api.settings.get())
        except (ApiError, requests.RequestException) as e:
            log.warning(f"Could not load pomodoro defaults from server settings: {e}")
        self.pomodoro.restore()
        self._sync_pomodoro_spins()

    # Returns False when the user gave up on signing in.
    def _ensure_logged_in(self):
        try:
            user = self.api.auth.me() if self.api.access_token else None
        except UnauthorizedError:
            user = None
        except ApiError as e:
            QMessageBox.warning(self, "Connection Error", f"Could not reach the server:\n{e}")
            return False
        if user is not None:
            log.info(f"Signed in as {user.email}")
            return True

        dialog = LoginDialog(self, self.api)
        return bool(dialog.exec())

    def _load_projects(self):
        try:
            projects = self.api.projects.list()
        except ApiError as e:
            self._on_error(f"Error loading projects: {e}")
            return
        self._project_combo.blockSignals(True)
        self._project_combo.clear()
        self._project_combo.addItem("Select a project", None)
        self._project_names = {project.id: project.name for project in projects}
        for project in projects:
            if project.status == "active":
                self._project_combo.addItem(project.name, project.id)
        self._project_combo.blockSignals(False)

    def _select_project_in_combo(self, project_id):
        index = self._project_combo.findData(project_id) if project_id else 0
        self._project_combo.blockSignals(True)
        self._project_combo.setCurrentIndex(max(0, index))
        self._project_combo.blockSignals(False)

    def _load_work_types(self, project_id):
        try:
            self._work_types = [wt for wt in self.api.work_types.list(project_id) if wt.status == "active"]
        except ApiError as e:
            self._work_types = []
            log.error(f"Error loading work types for project '{project_id}': {e}")
        self._work_type_combo.blockSignals(True)
        self._work_type_combo.clear()
        self._work_type_combo.addItem("No work type", None)
        for work_type in self._work_types:
            self._work_type_combo.addItem(work_type.name, work_type.id)
        index = self._work_type_combo.findData(self.timer.work_type_id)
        self._work_type_combo.setCurrentIndex(max(0, index))
        self._work_type_combo.blockSignals(False)

    # ------------------------------------------------------------------ #
    #  Handlers                                                            #
    # ------------------------------------------------------------------ #

    def _on_project_selected(self, index):
        project_id = self._project_combo.itemData(index)
        if project_id is None:
            return
        self.timer.switch_project(project_id, self._project_combo.itemText(index))
        self._load_work_types(project_id)

    def _on_work_type_selected(self, index):
        self.timer.set_work_type(self._work_type_combo.itemData(index), self._work_type_combo.itemText(index))

    def _on_limit_changed(self, minutes):
        self.timer.set_time_limit(minutes * MS_PER_MINUTE if minutes else None)

    def _on_manual_entry(self):
        if not self.timer.project_id:
            self._on_error("Select a project before adding time")
            return
        dialog = ManualEntryDialog(self, self.recorder, self.timer.project_id, self.timer.project_name,
                                   self._work_types)
        if dialog.exec():
            self._refresh_timer()

    def _on_manage_projects(self):
        dialog = ProjectsDialog(self, self.api, confirm_delete=self.settings["confirm_delete"])
        dialog.exec()
        if dialog.changed:
            self._load_projects()
            self._select_project_in_combo(self.timer.project_id)

    def _on_manage_work_types(self):
        if not self.timer.project_id:
            self._on_error("Select a project before editing its work types")
            return
        dialog = WorkTypesDialog(self, self.api, self.timer.project_id, self.timer.project_name,
                                 confirm_delete=self.settings["confirm_delete"])
        dialog.exec()
        if dialog.changed:
            self._load_work_types(self.timer.project_id)

    def _on_show_entries(self):
        dialog = EntriesDialog(self, self.api, self._project_names, confirm_delete=self.settings["confirm_delete"])
        dialog.exec()
        if dialog.changed:
            self.recorder.refresh_daily_total()
            self._refresh_timer()

    def _on_show_reports(self):
        ReportsDialog(self, self.reports).exec()

    def _on_settings(self):
        dialog = SettingsDialog(self, self.api, self.settings)
        if not dialog.exec():
            return

        self.settings["sound_notifications"] = dialog.chosen_sound_notifications
        self.settings["system_notifications"] = dialog.chosen_system_notifications
        self.settings["confirm_delete"] = dialog.chosen_confirm_delete
        self.notifier.sound_enabled = dialog.chosen_sound_notifications
        self.notifier.system_enabled = dialog.chosen_system_notifications
        if dialog.chosen_always_on_top != self.settings["always_on_top"]:
            self.settings["always_on_top"] = dialog.chosen_always_on_top
            self.setWindowFlag(Qt.WindowStaysOnTopHint, dialog.chosen_always_on_top)
            self.show()
        config.save_settings(self.settings)

        if dialog.server_settings is not None:
            self.pomodoro.apply_settings(dialog.server_settings)
            self._sync_pomodoro_spins()

    def _on_pomodoro_toggle(self):
        if self.pomodoro.is_running:
            self.pomodoro.pause()
        else:
            self.pomodoro.start()

    def _on_logout(self):
        self.timer.shutdown()
        try:
            self.api.auth.logout()
        except ApiError as e:
            log.warning(f"Logout request failed, token cleared locally: {e}")
        self._bootstrap()

    def _on_error(self, message):
        QMessageBox.warning(self, "Project Timer", message)

    # ------------------------------------------------------------------ #
    #  Display                                                             #
    # ------------------------------------------------------------------ #

    def _refresh_timer(self):
        self._time_lbl.setText(self.timer.timer_value)
        self._status_lbl.setText(self.timer.status_text)
        self._toggle_btn.setText("Pause" if self.timer.is_running else ("Resume" if self.timer.is_paused else "Start"))
        self._finish_btn.setEnabled(self.timer.is_running or self.timer.is_paused)
        self._daily_lbl.setText(f"Today: {format_human_readable(self.timer.daily_total)}")

        limit_minutes = (self.timer.time_limit or 0) // MS_PER_MINUTE
        if self._limit_spin.value() != limit_minutes:
            self._limit_spin.blockSignals(True)
            self._limit_spin.setValue(limit_minutes)
            self._limit_spin.blockSignals(False)

    def _refresh_pomodoro(self):
        self._pomo_mode_lbl.setText("Work" if self.pomodoro.mode == MODE_WORK else "Rest")
        self._pomo_cycles_lbl.setText(f"Cycles: {self.pomodoro.cycles}")
        self._pomo_time_lbl.setText(self.pomodoro.time_display)
        self._pomo_toggle_btn.setText("Pause" if self.pomodoro.is_running else "Start")

    def _sync_pomodoro_spins(self):
        for spin, value in ((self._work_spin, self.pomodoro.work_duration),
                            (self._rest_spin, self.pomodoro.rest_duration)):
            spin.blockSignals(True)
            spin.setValue(value)
            spin.blockSignals(False)

    # ------------------------------------------------------------------ #
    #  Window close                                                        #
    # ------------------------------------------------------------------ #

    def closeEvent(self, event):
        try:
            self.timer.shutdown()
            self.pomodoro.shutdown()
        except Exception as e:
            log.exception("Failed to save timer state on exit")
            QMessageBox.warning(self, "Save Error",
                                f"Failed to save timer state:\n{e}")
        self._tray.hide()
        event.accept()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    app = QApplication(sys.argv)
    settings = config.load_settings()
    if settings["log_to_console"]:
        enable_console_logging()

    store = JsonFileStore(config.STORE_PATH)
    api = ApiClient(settings["api_url"], store, timeout=settings["api_timeout"])
    window = MainWindow(settings, api, store)
    window.show()
    sys.exit(app.exec())
