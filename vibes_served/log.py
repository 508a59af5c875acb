from __future__ import annotations

import json
import logging


_STRUCTURED_FIELDS = ("path", "method", "status", "duration_ms", "outcome", "file")


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in _STRUCTURED_FIELDS:
            if hasattr(record, k):
                payload[k] = getattr(record, k)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


handler = logging.StreamHandler()
handler.setFormatter(JsonLogFormatter())


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach the JSON handler to the ``vibes_served`` logger once."""
    logger = logging.getLogger("vibes_served")
    if handler not in logger.handlers:
        logger.addHandler(handler)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    return logger
