"""Durable key-value store, the desktop stand-in for browser localStorage.

The whole store is a single JSON object in one file. Every read goes back to
disk, so two running instances sharing the file see each other's writes the
same way two browser tabs share localStorage (last write wins).
"""

import json
import os
import tempfile
from pathlib import Path
from tt.common.logger import log


class JsonFileStore:

    def __init__(self, path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    # Returns the full {key: str} mapping from disk. Missing or corrupt files read as empty.
    def _read_all(self):
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            log.warning(f"Could not read key-value store '{self.path}', treating it as empty.", exc_info=True)
            return {}
        if not isinstance(data, dict):
            log.warning(f"Key-value store '{self.path}' does not hold a JSON object, treating it as empty.")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    # Writes to a temp file beside the store and swaps it in, so a crash mid-write never leaves half a file.
    def _write_all(self, data):
        fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            try: os.remove(tmp_path)
            except OSError: pass
            raise

    def get_item(self, key):
        return self._read_all().get(key)

    def set_item(self, key, value):
        if not isinstance(value, str):
            raise TypeError(f"Store values must be strings, got {type(value).__name__} for '{key}'")
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key):
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def keys(self):
        return list(self._read_all().keys())
