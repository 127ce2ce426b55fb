import logging
import sys

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "direct-upload-api"

_configured = False


class _ServiceFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.service = SERVICE_NAME
        return True


def configure_logging(level: str = "INFO") -> None:
    """Send application logs to stdout as JSON lines.

    Safe to call more than once; only the first call installs the handler.
    Uvicorn keeps its own ``uvicorn.*`` handlers.
    """
    global _configured
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger("upload_api").setLevel(log_level)
    if _configured:
        return

    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(service)s %(message)s",
        json_ensure_ascii=False,
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(_ServiceFilter())

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(log_level)
    # botocore is chatty at DEBUG and may print signing material.
    logging.getLogger("botocore").setLevel(logging.WARNING)
    _configured = True
