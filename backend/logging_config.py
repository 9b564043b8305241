# app/logging_config.py
"""
Logging setup shared by the API process.

Everything goes through the stdlib ``logging`` module; modules grab their own
logger with ``logging.getLogger(__name__)``. Upstream URLs and headers can
carry keys, so a filter masks them before a record is emitted.
"""
import logging
import re
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class SensitiveDataFilter(logging.Filter):
    """Mask bearer tokens and API keys in log messages."""

    SENSITIVE_PATTERNS = [
        (r'"(api[_-]?key)"\s*:\s*"[^"]*"', r'"\1": "***"'),
        (r"(api[_-]?key=)[^\s&]+", r"\1***"),
        (r'Bearer\s+([^\s"]+)', r"Bearer ***"),
        (r'Authorization:\s*([^\s"]+)', r"Authorization: ***"),
        (r"sk-or-[A-Za-z0-9_-]+", r"sk-or-***"),
    ]

    def _mask(self, text: str) -> str:
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._mask(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # create_app may run more than once (tests), keep a single handler
    for handler in root.handlers:
        if getattr(handler, "_lifesense", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(SensitiveDataFilter())
    handler._lifesense = True
    root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
