# promptiq/logging_setup.py
import logging
import os

from pythonjsonlogger import jsonlogger

SERVICE_NAME = os.getenv("SERVICE_NAME", "promptiq")

_HANDLER_NAME = "promptiq-json"


class ContextFilter(logging.Filter):
    def filter(self, record):
        # request_id / user_id arrive through extra={...}; default them so the formatter never fails
        if not hasattr(record, "request_id"):
            record.request_id = None
        if not hasattr(record, "user_id"):
            record.user_id = None
        record.service = SERVICE_NAME
        return True


base_format = (
    "%(asctime)s %(levelname)s %(service)s %(name)s %(message)s "
    "%(request_id)s %(user_id)s"
)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach the JSON stdout handler to the root logger (safe to call more than once)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    if not any(getattr(h, "name", None) == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.name = _HANDLER_NAME
        handler.setFormatter(jsonlogger.JsonFormatter(base_format))
        handler.addFilter(ContextFilter())
        root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return root
