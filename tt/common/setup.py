import os
from pathlib import Path
from dataclasses import dataclass

# Lil helper function to create missing directories if missing, and optionally error out when a path
# doesn't exist.
def ensure_directory(path: Path,must_exist=False):
    if must_exist:
        if not path.exists():
            raise FileNotFoundError(f"Required directory is missing: {path}")
        if not path.is_dir():
            raise NotADirectoryError(f"Expected a directory, got a file: {path}")
    else:
        path.mkdir(parents=True,exist_ok=True)
    return path

# Picks the per-user data folder. TIMETRACKER_HOME always wins, so tests and portable installs can point the whole
# app somewhere else.
def _resolve_data_dir():
    override = os.getenv("TIMETRACKER_HOME")
    if override:
        return Path(override)
    appdata = os.getenv("APPDATA")
    if appdata:
        return Path(appdata) / "ProjectTimer"
    xdg_data = os.getenv("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data) / "project-timer"
    return Path.home() / ".local" / "share" / "project-timer"

# Dataclass for accessing paths across program.
@dataclass(frozen=False)
class ProjectPaths:

    root: Path
    assets: Path
    data: Path

    logs: Path
    current: Path

    @staticmethod
    def build():
        # Folder for the package itself, no user-specific files
        root = Path(__file__).resolve().parents[1]

        # Bundled sound cues live here. Missing cue files are tolerated by the audio player.
        assets = root / "assets"

        # Folder for all user-specific data
        data = ensure_directory(_resolve_data_dir())

        # Folders within the data folder
        logs = ensure_directory(data / "logs")
        current = ensure_directory(data / "current")

        return ProjectPaths(
            root = root,
            assets = assets,
            data = data,
            logs = logs,
            current = current,
        )
PATHS = ProjectPaths.build()
