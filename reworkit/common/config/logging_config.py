import logging
import logging.config
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["file"] = record.pathname
        log_record["line"] = record.lineno

        if hasattr(record, "package"):
            log_record["package"] = record.package
        if hasattr(record, "arch"):
            log_record["arch"] = record.arch

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def get_logging_config(
    log_level: str = "INFO",
    json_format: bool = True,
) -> Dict[str, Any]:
    handlers_config = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "stream": "ext://sys.stdout",
            "formatter": "json" if json_format else "standard",
        }
    }

    handler_names = list(handlers_config.keys())

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": CustomJsonFormatter,
                "format": "%(timestamp)s %(level)s %(name)s %(message)s",
            },
        },
        "handlers": handlers_config,
        "loggers": {
            "": {
                "handlers": handler_names,
                "level": log_level,
                "propagate": True,
            },
            "reworkit": {
                "handlers": handler_names,
                "level": log_level,
                "propagate": False,
            },
            "uvicorn": {
                "handlers": handler_names,
                "level": "INFO",
                "propagate": False,
            },
            "aiohttp": {
                "handlers": handler_names,
                "level": "WARNING",
                "propagate": False,
            },
        },
    }

    return config


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = True,
) -> None:
    config = get_logging_config(log_level=log_level, json_format=json_format)
    logging.config.dictConfig(config)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    def __init__(
        self,
        logger: logging.Logger,
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(logger, extra or {})

    def process(
        self,
        msg: str,
        kwargs: Dict[str, Any]
    ) -> tuple:
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def get_build_logger(package: str, arch: Optional[str] = None) -> LoggerAdapter:
    logger = get_logger("reworkit.build")
    extra = {"package": package}
    if arch:
        extra["arch"] = arch
    return LoggerAdapter(logger, extra)
