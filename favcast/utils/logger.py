import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""
    def format(self, record):
        log_obj = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


class DatabaseLogHandler(logging.Handler):
    """
    Persists log records through a repository's ``save_log_entry``.
    A failed write goes to ``handleError`` and never reaches the caller.
    """

    def __init__(self, repository, level=logging.WARNING):
        super().__init__(level)
        self.repository = repository

    def emit(self, record):
        # records produced while saving must not recurse into the database
        if record.name.startswith("sqlalchemy"):
            return
        try:
            details = {"logger": record.name, "line": record.lineno}
            if record.exc_info:
                details["exception"] = logging.Formatter().formatException(record.exc_info)
            self.repository.save_log_entry(record.levelname, record.getMessage(), details)
        except Exception:
            self.handleError(record)


def setup_logging(
    logs_dir: Optional[str] = "logs",
    level: str = "INFO",
    repository=None,
) -> logging.Logger:
    """
    Configure the ``favcast`` logger tree.
    Writes human-readable logs to stdout and structured JSON logs to file,
    and WARNING+ records to the database when a repository is given.
    """
    logger = logging.getLogger("favcast")
    logger.setLevel(level.upper())

    # Avoid adding duplicate handlers if setup_logging is called multiple times
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    logger.addHandler(console_handler)

    if logs_dir:
        log_dir = Path(logs_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(
            log_dir / f"favcast-{datetime.now():%Y-%m-%d}.json.log", encoding="utf-8"
        )
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    if repository is not None:
        logger.addHandler(DatabaseLogHandler(repository))

    return logger
