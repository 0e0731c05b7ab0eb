from PySide6.QtCore import QUrl
from PySide6.QtMultimedia import QSoundEffect
from PySide6.QtWidgets import QApplication, QSystemTrayIcon
from tt.common.logger import log
from tt.common.setup import PATHS
from tt.util.tones import ensure_cue

# How long a tray balloon stays up, in ms
_MESSAGE_TIMEOUT = 5000


# Plays the .wav cue for a SoundType. A file dropped into the bundled sounds folder wins, otherwise the built-in cue
# is generated once into the user's data folder. The platform beep is the last resort.
class QtAudioPlayer:

    def __init__(self, sounds_dir=None, cache_dir=None, parent=None):
        self._sounds_dir = sounds_dir or PATHS.assets / "sounds"
        self._cache_dir = cache_dir or PATHS.current / "sounds"
        self._parent = parent
        self._effects = {}

    def cue_path(self, sound):
        bundled = self._sounds_dir / f"{sound.value}.wav"
        if bundled.exists():
            return bundled
        try:
            return ensure_cue(self._cache_dir, sound.value)
        except OSError:
            log.error(f"Could not write the built-in cue for '{sound.value}'", exc_info=True)
            return None

    def _effect(self, sound):
        if sound not in self._effects:
            path = self.cue_path(sound)
            effect = None
            if path is not None:
                effect = QSoundEffect(self._parent)
                effect.setSource(QUrl.fromLocalFile(str(path)))
            else:
                log.debug(f"No cue for '{sound.value}', falling back to the system beep")
            self._effects[sound] = effect
        return self._effects[sound]

    def play(self, sound):
        effect = self._effect(sound)
        if effect is None:
            QApplication.beep()
            return
        effect.play()


# System notifications through the tray icon's balloon messages.
class TrayNotifier:

    def __init__(self, tray: QSystemTrayIcon):
        self._tray = tray

    # Desktop equivalent of the browser's permission check: can the platform show messages at all.
    def permission_granted(self):
        return QSystemTrayIcon.isSystemTrayAvailable() and QSystemTrayIcon.supportsMessages() and self._tray.isVisible()

    def show(self, title, message):
        self._tray.showMessage(title, message, QSystemTrayIcon.MessageIcon.Information, _MESSAGE_TIMEOUT)
