from __future__ import annotations

import json
import logging
import os
import sys
import threading
import time
from typing import IO, Optional


_CONFIGURED_FLAG = "_gallery_configured"


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line:
      { "t": 1700000000000, "lvl": "INFO", "name": "prefetch", "msg": "snapshot saved",
        "thread": "size-probe_2", "extra": {"path": "public/data.json"} }

    "thread" is only present for records emitted off the main thread (probe workers).
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.threadName and record.threadName != threading.main_thread().name:
            payload["thread"] = record.threadName
        # log.info("...", extra={"extra": {...}})
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload["extra"] = extra
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _resolve_level(level: Optional[str]) -> int:
    """explicit arg > env LOG_LEVEL > INFO; unknown names fall back to INFO."""
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    lvl = logging.getLevelName(name)
    return lvl if isinstance(lvl, int) else logging.INFO


def setup_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None, force: bool = False) -> None:
    """
    Install a single JSON handler on the root logger.

    Runs once per process unless `force=True` (the prefetch CLI reconfigures
    for --log-level). requests/urllib3 log each pooled connection at DEBUG;
    they are held at WARNING so HEAD probes do not flood the output.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG, False) and not force:
        return

    lvl = _resolve_level(level)
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(lvl)
    logging.getLogger("urllib3").setLevel(max(lvl, logging.WARNING))
    setattr(root, _CONFIGURED_FLAG, True)


def get_logger(name: str) -> logging.Logger:
    """Module logger; configures the root on first use."""
    setup_logging()
    return logging.getLogger(name)
