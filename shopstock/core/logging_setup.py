# shopstock/core/logging_setup.py

import logging
import logging.handlers
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(settings) -> None:
    """Configure the root logger (console, plus a rotating file when LOG_FILE is set)."""
    fmt = logging.Formatter(LOG_FORMAT)
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers on reload
    if not any(getattr(h, "_shopstock", False) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        console._shopstock = True
        root.addHandler(console)

        if settings.LOG_FILE:
            log_path = Path(settings.LOG_FILE).expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
            )
            file_handler.setFormatter(fmt)
            file_handler._shopstock = True
            root.addHandler(file_handler)

    # uvicorn installs its own handlers; only align the levels
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        logging.getLogger(name).setLevel(level)
