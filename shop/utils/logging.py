"""
Custom JSON formatter for logging (without external dependencies).
"""
import json
import logging
from datetime import datetime, timezone

# Context keys copied from ``extra=`` into the JSON line when present.
EXTRA_FIELDS = (
    "request_id",
    "user_id",
    "operation",
    "status",
    "idempotency_key",
    "order_id",
    "customer_id",
    "product_id",
    "items_count",
    "quantity",
    "stock_quantity",
    "total_amount",
    "from_status",
    "to_status",
    "attempt",
    "error",
    "error_code",
)


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record):
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)
