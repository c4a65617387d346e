import json
import logging
import sys
from contextvars import ContextVar

from app.config import settings

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

_PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get() or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Install one console handler on the root logger.

    Safe to call more than once; the previous handler installed here is
    replaced rather than duplicated.
    """
    level = (level or settings.log_level).upper()
    json_output = settings.log_json if json_output is None else json_output

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name("topology-console")
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_PLAIN_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == "topology-console":
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request at INFO; the clients log their own calls.
    logging.getLogger("httpx").setLevel(logging.WARNING)
