"""Prometheus metrics for risk assessments, contract lifecycle, capital and protocol events"""

from prometheus_client import Counter, Histogram

from quantara_gateway.domain.models import EventType, ProtocolEvent

# Risk metrics
assessment_counter = Counter(
    "quantara_risk_assessment_total",
    "Total risk assessments made",
    ["tier"],  # AAA .. D
)

# Contract metrics
contract_transition_counter = Counter(
    "quantara_contract_transition_total",
    "Contract status transitions",
    ["target"],  # FUNDED | ACTIVE | COMPLETED | DEFAULTED
)

invalid_transition_counter = Counter(
    "quantara_contract_invalid_transition_total",
    "Rejected contract status transitions",
)

# Capital metrics
capital_allocated_counter = Counter(
    "quantara_capital_allocated_total",
    "Capital committed to pools",
)

allocation_rejection_counter = Counter(
    "quantara_allocation_rejections_total",
    "Rejected capital allocations",
    ["reason"],  # insufficient_capital | concurrent_modification
)

# Insurance metrics
insurance_claim_counter = Counter(
    "quantara_insurance_claims_total",
    "Insurance claims processed",
    ["outcome"],  # covered | depleted
)

# Compliance metrics
compliance_flag_counter = Counter(
    "quantara_compliance_flags_total",
    "Compliance flags raised",
    ["severity"],
)

# Event channel metrics
event_counter = Counter(
    "quantara_protocol_events_total",
    "Protocol events published",
    ["type"],
)

event_handler_failure_counter = Counter(
    "quantara_event_handler_failures_total",
    "Event handlers that raised during delivery",
    ["type"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_event(event: ProtocolEvent) -> None:
    """Global event subscriber counting every published event by type"""
    event_counter.labels(type=event.type.value).inc()


def record_handler_failure(event_type: EventType, error: Exception) -> None:
    event_handler_failure_counter.labels(type=EventType(event_type).value).inc()
