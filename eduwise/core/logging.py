"""Logging configuration shared by the API process and the db scripts."""
import logging.config

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "detailed": {
            "format": "{asctime} {levelname} [{name}:{lineno}] {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "detailed",
        },
    },
    "loggers": {
        "eduwise": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "uvicorn.error": {
            "level": "INFO",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
}


def configure_logging(level: str = "INFO") -> None:
    config = dict(LOGGING)
    config["loggers"] = {name: dict(cfg) for name, cfg in LOGGING["loggers"].items()}
    config["loggers"]["eduwise"]["level"] = level.upper()
    logging.config.dictConfig(config)
