import logging
import re
import sys

from speech_relay.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

REDACT_PATTERNS = [
    re.compile(r"\b\d{9,16}\b"),                 # phone numbers, ids
    re.compile(r"\b[\w\.-]+@[\w\.-]+\.\w+\b"),   # emails
]

def redact(text: str) -> str:
    t = text or ""
    for p in REDACT_PATTERNS:
        t = p.sub("[REDACTED]", t)
    return t

class RedactingFilter(logging.Filter):
    """Masks contact details in the rendered message of every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        masked = redact(msg)
        if masked != msg:
            record.msg = masked
            record.args = None
        return True

def configure_logging() -> logging.Logger:
    s = get_settings()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    if s.REDACT_LOGS:
        handler.addFilter(RedactingFilter())

    root = logging.getLogger()
    root.setLevel(s.LOG_LEVEL.upper())
    root.handlers = [handler]

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        lg = logging.getLogger(name)
        lg.handlers = [handler]
        lg.propagate = False

    return root
