"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "cashflow-gateway"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_projection(
    request_id: str,
    horizon_days: int,
    has_reliable_base: bool,
    optimistic_danger_days: int,
    pessimistic_danger_days: int,
    is_estimated: bool,
    duration_ms: float,
) -> None:
    """Log structured projection outcome"""
    logging.info(
        "Projection computed",
        extra={
            "request_id": request_id,
            "step": "projection_complete",
            "horizon_days": horizon_days,
            "has_reliable_base": has_reliable_base,
            "optimistic_danger_days": optimistic_danger_days,
            "pessimistic_danger_days": pessimistic_danger_days,
            "is_estimated": is_estimated,
            "duration_ms": duration_ms,
        },
    )


def log_entity_change(request_id: str, entity_type: str, entity_id: str, action: str) -> None:
    """Log a finance entity mutation"""
    logging.info(
        "Finance entity changed",
        extra={
            "request_id": request_id,
            "step": "entity_change",
            "entity_type": entity_type,
            "entity_id": entity_id,
            "action": action,
        },
    )
