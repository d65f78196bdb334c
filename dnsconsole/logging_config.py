"""
Logging configuration with health check suppression and an audit channel
"""

import json
import logging
import logging.config
from datetime import UTC, datetime
from typing import Any, Dict, Optional

AUDIT_LOGGER_NAME = "dnsconsole.audit"


class HealthCheckFilter(logging.Filter):
    """Filter to suppress health check endpoint logs."""

    def __init__(self, path: str = "/api/health"):
        super().__init__()
        self.path = path

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out health check requests from uvicorn access logs."""
        if record.name == "uvicorn.access":
            message = record.getMessage()
            if self.path in message and "GET" in message:
                return False
        return True


def audit_event(event_type: str, data: Dict[str, Any], operator: Optional[str] = None) -> None:
    """
    Emit a security audit event as a single JSON line.

    Callers must never put secrets in data.
    """
    event = {
        "type": event_type,
        "operator": operator,
        "data": data,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    logging.getLogger(AUDIT_LOGGER_NAME).info(json.dumps(event, default=str))


def get_logging_config(log_level: str = "INFO", health_path: str = "/api/health") -> Dict[str, Any]:
    """Get logging configuration with health check suppression."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter,
                "path": health_path,
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "access": {
                "format": "%(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout"
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"]
            }
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False
            },
            "dnsconsole": {
                "handlers": ["default"],
                "level": log_level,
                "propagate": False
            },
            # httpx logs full request URLs at INFO
            "httpx": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": log_level,
            "handlers": ["default"]
        }
    }
