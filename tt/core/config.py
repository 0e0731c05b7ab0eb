import json
import os
from tt.common.logger import log
from tt.common.setup import PATHS


#region === Helpers and Paths ===

SETTINGS_PATH = PATHS.current / "settings.json"
# Durable key-value store holding the timer snapshots, the pomodoro state and the access token
STORE_PATH = PATHS.current / "storage.json"

# Local (per-machine) settings. Per-user settings like pomodoro durations live on the server.
_SETTINGS_DEFAULTS = {
    "api_url": "http://localhost:4000",
    "api_timeout": 10,
    "sound_notifications": True,
    "system_notifications": True,
    "test_mode": False,
    "always_on_top": False,
    "confirm_delete": True,
    "log_to_console": False,
}

_TRUE_STRINGS = ("1", "true", "yes", "on")
_FALSE_STRINGS = ("0", "false", "no", "off")

def build_default_settings():
    return dict(_SETTINGS_DEFAULTS)

# True when value has the same JSON type as the default. bool is not accepted for numbers, and ints are fine for floats.
def _matches_default_type(value, default):
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, (int, float)):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, type(default))

# Environment overrides, applied on top of whatever was loaded. Never written back to disk.
def _apply_env_overrides(settings):
    api_url = os.getenv("TIMETRACKER_API_URL")
    if api_url:
        settings["api_url"] = api_url
        log.info(f"Using API url from TIMETRACKER_API_URL: {api_url}")

    test_mode = os.getenv("TIMETRACKER_TEST_MODE")
    if test_mode:
        lowered = test_mode.strip().lower()
        if lowered in _TRUE_STRINGS:
            settings["test_mode"] = True
        elif lowered in _FALSE_STRINGS:
            settings["test_mode"] = False
        else:
            log.warning(f"Ignoring unrecognized TIMETRACKER_TEST_MODE value '{test_mode}'")
    return settings

#endregion === Helpers and Paths ===

#region === Saving and Loading Settings ===

# Loads settings.json from PATHS.current, filling in defaults for anything missing or of the wrong type.
def load_settings():
    try:
        if not SETTINGS_PATH.exists():
            settings = build_default_settings()
            log.info("No existing settings.json found in `current`, writing fresh default settings.")
            try:
                save_settings(settings)
            except OSError:
                log.warning(f"Could not write default settings to '{SETTINGS_PATH}'", exc_info=True)
        else:
            with open(SETTINGS_PATH, "r", encoding="utf-8") as f:
                settings = json.load(f)
            if not isinstance(settings, dict):
                raise TypeError(f"settings.json must hold an object, got {type(settings).__name__}")

            defaulted_values = set()
            for key, default in _SETTINGS_DEFAULTS.items():
                if key not in settings:
                    defaulted_values.add(key)
                    settings[key] = default
                elif not _matches_default_type(settings[key], default):
                    defaulted_values.add(key)
                    settings[key] = default

            if defaulted_values:
                log.warning(f"Successfully loaded settings from '{SETTINGS_PATH}', but with missing or invalid "
                            f"values that were defaulted: {', '.join(sorted(defaulted_values))}")
            else:
                log.info(f"Successfully loaded settings from '{SETTINGS_PATH}'.")
    # Fall back to fresh defaults in case of error, but warn in log
    except (json.JSONDecodeError, OSError, TypeError):
        log.warning("Ran into an error while trying to load settings.json, falling back to default settings.",
                    exc_info=True)
        settings = build_default_settings()
    return _apply_env_overrides(settings)

# Write the given settings to disk under PATHS.current / settings.json
def save_settings(settings):
    with open(SETTINGS_PATH, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)
    log.info(f"Successfully saved settings to '{SETTINGS_PATH}'")

#endregion === Saving and Loading Settings ===
