"""
Custom logging configuration to suppress health check logs
"""

import logging
import logging.config
from typing import Dict, Any

HEALTH_CHECK_PATHS = frozenset({"/health", "/healthz"})


class HealthCheckFilter(logging.Filter):
    """Filter to suppress successful probe requests from uvicorn access logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True

        # uvicorn passes (client, method, path, http_version, status)
        args = record.args
        if isinstance(args, tuple) and len(args) >= 5:
            method, path, status = args[1], str(args[2]), args[4]
        else:
            parts = record.getMessage().replace('"', "").split()
            try:
                index = parts.index("GET")
            except ValueError:
                return True
            method = "GET"
            path = parts[index + 1] if index + 1 < len(parts) else ""
            status = parts[-1]

        if method != "GET" or path.split("?", 1)[0] not in HEALTH_CHECK_PATHS:
            return True
        # Keep failing probes visible
        return str(status) != "200"


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with health check suppression."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter
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
            "nighthawk_adapter": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "INFO",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the adapter logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
