import logging
import logging.config
from pathlib import Path
from curriculum.core.config import settings


def _rotating(filename: Path, formatter: str, level: str) -> dict:
    return {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "formatter": formatter,
        "level": level,
        "filename": str(filename),
        "when": "midnight",
        "backupCount": settings.LOG_RETENTION_DAYS,
        "encoding": "utf-8",
        "utc": True,
    }


def setup_logging(log_dir: str | None = None, level: str | None = None):
    """Console plus daily-rotated files: ``curriculum.log`` for the app, ``access.log`` for requests."""
    log_path = Path(log_dir or settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)
    level = (level or settings.LOG_LEVEL).upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": "%(asctime)s [%(levelname)s] %(name)s %(message)s"},
                "access": {"format": "%(asctime)s %(message)s"},
            },
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "default", "level": level},
                "file": _rotating(log_path / "curriculum.log", "default", level),
                "access_file": _rotating(log_path / "access.log", "access", level),
            },
            "loggers": {
                # one access line per request comes from RequestIdMiddleware
                "curriculum.access": {"handlers": ["console", "access_file"], "level": level, "propagate": False},
                "uvicorn.access": {"handlers": ["console"], "level": "WARNING", "propagate": False},
                "uvicorn.error": {"handlers": ["console", "file"], "level": level, "propagate": False},
                "sqlalchemy.engine": {"handlers": ["console", "file"], "level": "WARNING", "propagate": False},
                "": {"handlers": ["console", "file"], "level": level},
            },
        }
    )
