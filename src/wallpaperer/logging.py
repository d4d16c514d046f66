from datetime import datetime
import logging
from pathlib import Path
import sys

COMPONENT_LOGGERS: dict[str, logging.Logger] = {}

COMPONENTS = (
    "wallpaperer",
    "wallpaperer.topology",
    "wallpaperer.compositor",
    "wallpaperer.codec",
    "wallpaperer.droplet",
)


def get_default_log_dir() -> Path:
    """Return the default log directory: ~/.logs/wallpaperer/"""
    return Path.home() / ".logs" / "wallpaperer"


def get_logger(name: str, log_dir: Path | None = None) -> logging.Logger:
    if name in COMPONENT_LOGGERS:
        return COMPONENT_LOGGERS[name]

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    log_format = "%(asctime)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    if log_dir is not None:
        log_dir = log_dir.expanduser()
        log_dir.mkdir(parents=True, exist_ok=True)

        date_str = datetime.now().strftime("%Y-%m-%d")
        log_file = log_dir / f"wallpaperer-{date_str}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))

        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))

    logger.addHandler(console_handler)

    # Child components print through their own handler, not the parent's too.
    if "." in name:
        logger.propagate = False

    COMPONENT_LOGGERS[name] = logger
    return logger


def setup_logging(log_dir: Path | None = None) -> dict[str, logging.Logger]:
    loggers: dict[str, logging.Logger] = {}

    for component in COMPONENTS:
        if component in COMPONENT_LOGGERS and log_dir is not None:
            # Module-level loggers are created at import time without a file
            # handler; rebuild them so the log file is attached.
            reset_logger(component)
        loggers[component] = get_logger(component, log_dir)

    return loggers


def reset_logger(name: str) -> None:
    logger = COMPONENT_LOGGERS.pop(name, None)
    if logger is None:
        return
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)


def set_console_level(level: int) -> None:
    for logger in COMPONENT_LOGGERS.values():
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(
                handler, logging.FileHandler
            ):
                handler.setLevel(level)
