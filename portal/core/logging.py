"""JSON logging for the portal.

One JSON object per line on stderr. Besides the standard fields each line
carries the current ``request_id`` and, for signed-in visitors, the
``principal`` (``user:<id>``). Event-style messages such as
``activity.lookup_failed`` or ``auth.signin`` pass their details through
``extra={"extra_data": {...}}``, which is merged into the top level.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Mapping

from ..middlewares.request_id import principal_ctx_var, request_id_ctx_var


class JsonLogFormatter(logging.Formatter):
    """Format a record as a single JSON line with request context attached."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = request_id_ctx_var.get()
        if request_id:
            payload["request_id"] = request_id
        principal = principal_ctx_var.get()
        if principal:
            payload["principal"] = principal
        extra = getattr(record, "extra_data", None)
        if isinstance(extra, Mapping):
            payload.update(extra)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # Datetimes and other non-JSON values in extra_data are stringified.
        return json.dumps(payload, separators=(",", ":"), default=str)


def configure_logging(level: str | int = logging.INFO) -> None:
    """Install the JSON handler on the root logger at ``level`` (``LOG_LEVEL``)."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter())
    logging.root.handlers = [handler]
    logging.root.setLevel(level.upper() if isinstance(level, str) else level)
