import logging
import os
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from tt.common.setup import PATHS

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(filename)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOGGER_NAME = "projecttimer"
# Overrides the level of the rotating, latest and console logs. The per-run debug log always records DEBUG.
LOG_LEVEL_ENV = "TIMETRACKER_LOG_LEVEL"


def _level_from_env(default):
    value = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(value) if value else default
    return level if isinstance(level, int) else default

# Adds the handler built by factory() unless one with the same name is already attached. Repeated get_logger calls
# (tests, enable_console_logging) therefore never duplicate output.
def _attach(logger, handler_name, factory, level, fmt):
    if any(h.get_name() == handler_name for h in logger.handlers):
        return
    handler = factory()
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.set_name(handler_name)
    logger.addHandler(handler)

# Keeps the newest `keep` per-run debug logs.
def _prune_runs(run_dir, name, keep):
    runs = sorted(run_dir.glob(f"{name}_*.log"), key=lambda p: p.stat().st_mtime, reverse=True)
    for run in runs[keep:]:
        try:
            run.unlink()
        except OSError:
            pass

def get_logger(
        name = LOGGER_NAME,
        level = logging.INFO,
        log_dir: Path | None = None,
        max_bytes = 2 * 1024 * 1024,
        backup_count = 3,
        persistent = True,
        console = False,
        historical_debugs: int = 10
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    level = _level_from_env(level)

    log_dir = log_dir or PATHS.logs
    log_dir.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    # Rotating log shared by all sessions
    if persistent:
        _attach(logger, f"{name}:persistent", lambda: RotatingFileHandler(
            filename=log_dir / f"{name}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        ), level, fmt)

    # Just this session, overwritten on every start
    _attach(logger, f"{name}:latest",
            lambda: logging.FileHandler(log_dir / "latest.log", mode="w", encoding="utf-8"), level, fmt)

    # One full DEBUG file per run. The pid keeps two instances started in the same second apart.
    if historical_debugs > 0:
        run_dir = log_dir / "debug"
        run_dir.mkdir(parents=True, exist_ok=True)
        run_path = run_dir / f"{name}_{datetime.now():%Y-%m-%d_%H-%M-%S}_{os.getpid()}.log"
        _attach(logger, f"{name}:historical_debug",
                lambda: logging.FileHandler(run_path, encoding="utf-8"), logging.DEBUG, fmt)
        _prune_runs(run_dir, name, historical_debugs)

    if console:
        _attach(logger, f"{name}:console", logging.StreamHandler, level, fmt)

    return logger

# Adds the console handler after startup, once settings.json has been read.
def enable_console_logging(logger=None):
    return get_logger(name=(logger or log).name, level=logging.DEBUG, console=True, historical_debugs=0)

log = get_logger(level=logging.DEBUG, console=False, historical_debugs=10)
log.info(f"=== Project Timer session started (pid {os.getpid()}) ===")
