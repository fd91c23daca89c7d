import logging
import sys
import time
import uuid
from pythonjsonlogger import jsonlogger

# ---------- logger JSON ----------
# stderr only: stdout carries the MCP stdio stream
logger = logging.getLogger("infoplu_mcp")
_handler = logging.StreamHandler(sys.stderr)
_formatter = jsonlogger.JsonFormatter("%(levelname)s %(message)s %(asctime)s %(name)s")
_handler.setFormatter(_formatter)
logger.setLevel(logging.INFO)
logger.addHandler(_handler)


def new_request_id() -> str:
    return uuid.uuid4().hex


class Timer:
    def __enter__(self):
        self.t0 = time.perf_counter()
        return self

    def __exit__(self, *_):
        self.elapsed_ms = (time.perf_counter() - self.t0) * 1000.0


# ---------- output cap ----------
def truncate_text(s: str, limit: int) -> str:
    """
    Hard prefix cut of a rendered tool result.
    Returns exactly s[:limit] when s is longer than limit characters.
    """
    if len(s) <= limit:
        return s
    return s[:limit]
