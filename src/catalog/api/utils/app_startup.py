"""Loguru setup for the HTTP application."""

import logging
import sys
from pathlib import Path

from loguru import logger

from src.catalog.runtime.config.config_data import LoggingConfig
from src.catalog.runtime.context import get_config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Third-party loggers and the level they are allowed to speak at
STDLIB_LEVELS = {
    "sqlalchemy.pool": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.CRITICAL,
}


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records (SQLAlchemy, uvicorn) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # request logging middleware already covers access logs
        if record.name == "uvicorn.access":
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _add_file_sink(cfg: LoggingConfig, verbose_traces: bool) -> None:
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    as_json = cfg.format == "json"
    logger.add(
        str(path),
        level=cfg.level,
        format="{message}" if as_json else CONSOLE_FORMAT,
        serialize=as_json,
        rotation=f"{cfg.max_size_mb} MB",
        retention=cfg.backup_count,
        compression="zip",
        enqueue=True,
        backtrace=verbose_traces,
        diagnose=verbose_traces,
    )


def _route_stdlib_logging(sql_echo: bool) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in list(logging.root.manager.loggerDict):
        existing = logging.getLogger(name)
        existing.handlers = []
        existing.propagate = True

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if sql_echo else logging.WARNING)
    for name, level in STDLIB_LEVELS.items():
        logging.getLogger(name).setLevel(level)


def configure_logging() -> None:
    """Reset loguru to the sinks described by the ``logging`` config section.

    A colourised stderr sink is always installed; a rotating file sink is
    added when ``logging.file`` is set. Every record carries a ``request_id``
    extra, ``-`` outside a request.
    """
    config = get_config()
    cfg = config.logging
    verbose_traces = config.app.environment != "production"

    logger.remove()
    logger.configure(
        extra={"request_id": "-"},
        patcher=lambda record: record["extra"].setdefault("request_id", "-"),
    )

    logger.add(
        sys.stderr,
        level=cfg.level,
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=verbose_traces,
        diagnose=verbose_traces,
    )
    if cfg.file:
        _add_file_sink(cfg, verbose_traces)

    _route_stdlib_logging(config.database.echo)

    logger.bind(
        app_level=cfg.level,
        app_format=cfg.format,
        app_file=cfg.file,
        environment=config.app.environment,
    ).info("Logging configured")
