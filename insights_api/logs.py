import logging
import time
import uuid
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("insights_api.request")


def configure_logging(level: str = "INFO"):
    """Install a single stream handler on the package logger (idempotent)."""
    pkg = logging.getLogger("insights_api")
    pkg.setLevel(level)
    if not any(getattr(h, "_insights_handler", False) for h in pkg.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._insights_handler = True
        pkg.addHandler(handler)


class LogContext:
    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.status: Optional[int] = None

    def set_status(self, status: int): self.status = status

    @property
    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self.start) * 1000)

    def write(self, result: str = "OK", err: Optional[str] = None):
        level = logging.INFO if result == "OK" else logging.ERROR
        msg = f"{self.method} {self.path} -> {self.status} ({self.elapsed_ms} ms) request_id={self.request_id}"
        if err:
            msg += f" err={err}"
        logger.log(level, msg)
