"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from quantara_gateway.config import settings
from quantara_gateway.domain.models import ProtocolEvent


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_assessment(
    request_id: str,
    user_id: str,
    risk_score: int,
    tier: str,
    history_length: int,
    duration_ms: float,
) -> None:
    """Log structured risk assessment outcome"""
    logging.info(
        "Risk assessment completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "assessment_complete",
            "risk_score": risk_score,
            "tier": tier,
            "history_length": history_length,
            "duration_ms": duration_ms,
        },
    )


def log_contract_transition(request_id: str, contract_id: str, source: str, target: str) -> None:
    logging.info(
        "Contract status changed",
        extra={
            "request_id": request_id,
            "contract_id": contract_id,
            "step": "contract_transition",
            "from_status": source,
            "to_status": target,
        },
    )


def log_allocation(request_id: str, pool_id: str, investor_id: str, amount: float, available_after: float) -> None:
    logging.info(
        "Capital allocated",
        extra={
            "request_id": request_id,
            "pool_id": pool_id,
            "investor_id": investor_id,
            "step": "allocation_complete",
            "amount": amount,
            "available_after": available_after,
        },
    )


def log_claim(request_id: str, vault_id: str, claim_amount: float, reserve_after: float, status: str) -> None:
    logging.info(
        "Insurance claim processed",
        extra={
            "request_id": request_id,
            "vault_id": vault_id,
            "step": "claim_processed",
            "claim_amount": claim_amount,
            "reserve_after": reserve_after,
            "vault_status": status,
        },
    )


def log_event(event: ProtocolEvent) -> None:
    """Global event subscriber writing every protocol event to the log"""
    logging.info(
        "Protocol event published",
        extra={"event_id": event.id, "event_type": event.type.value, "payload": event.payload},
    )
