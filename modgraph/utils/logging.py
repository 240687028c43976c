"""Loguru setup for modgraph, with optional Pino-compatible NDJSON output.

Usage:
    from modgraph.utils.logging import logger
    logger.info("Loaded manifest")
    logger.debug("Resolved apply order")  # Only shows with --verbose or MODGRAPH_LOG_LEVEL=DEBUG

Environment Variables:
    MODGRAPH_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: WARNING)
    MODGRAPH_LOG_JSON: 0|1 (default: 0, human-readable on stderr)
    MODGRAPH_LOG_FILE: append NDJSON records to this file (optional)
    MODGRAPH_REQUEST_ID: correlation ID stamped on every JSON record
"""

import json
import os
import sys
import uuid

from loguru import logger

# Pino-compatible numeric levels
PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_HUMAN_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

_request_id = os.environ.get("MODGRAPH_REQUEST_ID") or str(uuid.uuid4())


def _to_pino(record) -> dict:
    """Convert a loguru record into a Pino log line."""
    pino_log = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": record["extra"].get("request_id", _request_id),
    }

    for key, value in record["extra"].items():
        if key != "request_id":
            pino_log[key] = value

    if record["exception"]:
        pino_log["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }

    return pino_log


def pino_compatible_sink(message):
    """Write log records to stdout as Pino-compatible NDJSON.

    {"level":30,"time":1715629847123,"msg":"...","pid":12345,"request_id":"..."}
    """
    # Never call logger.* inside a sink - causes infinite recursion
    sys.stdout.write(json.dumps(_to_pino(message.record), default=str) + "\n")
    sys.stdout.flush()


def _stderr_sink(message):
    # sys.stderr looked up per record so redirected streams are honoured
    sys.stderr.write(message)


def _ndjson_file_sink(path: str):
    def sink(message):
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(_to_pino(message.record), default=str) + "\n")

    return sink


def configure_logging(level: str | None = None, json_mode: bool | None = None,
                      log_file: str | None = None) -> None:
    """Replace every installed sink with modgraph's.

    Arguments left as None come from the MODGRAPH_LOG_* environment
    variables. Called once on import and again by ``modgraph --verbose``.
    """
    level = (level or os.environ.get("MODGRAPH_LOG_LEVEL", "WARNING")).upper()
    if json_mode is None:
        json_mode = os.environ.get("MODGRAPH_LOG_JSON", "0") == "1"
    log_file = log_file or os.environ.get("MODGRAPH_LOG_FILE")

    logger.remove()
    if json_mode:
        logger.add(pino_compatible_sink, level=level, colorize=False)
    else:
        logger.add(_stderr_sink, level=level, format=_HUMAN_FORMAT, colorize=sys.stderr.isatty())

    if log_file:
        # File always captures everything
        logger.add(_ndjson_file_sink(log_file), level="DEBUG")


def get_request_id() -> str:
    """Get the current request ID for correlation."""
    return _request_id


logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red><bold>")

configure_logging()


__all__ = [
    "logger",
    "configure_logging",
    "get_request_id",
    "pino_compatible_sink",
]
