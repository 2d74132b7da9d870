"""Logging configuration and the no-op diagnostic sink."""

import json
import logging
import sys
import time


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = "INFO", structured: bool = False) -> None:
    """
    Configure the root logger once.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...)
        structured: Emit JSON lines instead of plain text
    """
    root = logging.getLogger()
    if getattr(root, "_filtercache_configured", False):
        return

    handler = logging.StreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root._filtercache_configured = True  # type: ignore[attr-defined]


class NullLogger:
    """Diagnostic sink that discards every message."""

    def debug(self, msg: str, *args, **kwargs) -> None:
        pass
