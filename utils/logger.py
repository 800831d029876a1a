from loguru import logger
import sys
import os
from datetime import datetime

CONSOLE_FORMAT = "<green>[{time:HH:mm:ss}]</green> <level>{level}</level> | <cyan>{message}</cyan>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {thread.name} | {name}:{line} - {message}"


def log_file_path(log_dir: str) -> str:
    return os.path.join(log_dir, f"nowplaying_{datetime.now().strftime('%Y-%m-%d')}.log")


def setup_logger(log_dir: str = "logs", console_level: str = "INFO"):
    """
    Route logs to stdout and a rotating file in ``log_dir``.
    Safe to call again; existing sinks are replaced.
    """
    os.makedirs(log_dir, exist_ok=True)
    logger.remove()

    logger.add(sys.stdout, level=console_level, format=CONSOLE_FORMAT)
    # Renders log from threadpool workers.
    logger.add(
        log_file_path(log_dir),
        rotation="10 MB",
        retention="10 days",
        level="DEBUG",
        encoding="utf-8",
        enqueue=True,
        format=FILE_FORMAT,
    )

    logger.info(f"✅ Logging to {log_dir}")

def get_logger(name=None):
    """Shared Loguru logger; ``name`` is accepted for call-site symmetry."""
    return logger
