import json
import logging
import os
from contextvars import ContextVar
from datetime import datetime, timezone

from tikky.core.config import settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, stamped with the service identity."""

    def __init__(self, service: str, version: str) -> None:
        super().__init__()
        self.service = service
        self.version = version

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "version": self.version,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
            "thread": record.threadName,
        }
        request_id = request_id_ctx.get()
        if request_id:
            payload["request_id"] = request_id
        event = getattr(record, "event", None)
        if event is not None:
            payload.update(event)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(
    level: str, service: str | None = None, version: str | None = None
) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonFormatter(service or settings.service_name, version or settings.version)
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())
