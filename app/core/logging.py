import logging
from logging.config import dictConfig

business_logger = logging.getLogger("app.business")


def configure_logging(level: str = "INFO"):
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "app": {"handlers": ["console"], "level": level, "propagate": False},
            "sqlalchemy.engine": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        },
    })


def log_business_event(event: str, user_id, action: str, status: str, **details):
    extra = " ".join(f"{k}={v}" for k, v in details.items())
    business_logger.info(
        "event=%s user=%s action=%s status=%s %s", event, user_id, action, status, extra
    )
