"""GET /v1/events - recent protocol events"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from quantara_gateway.api.dependencies import get_event_bus
from quantara_gateway.api.v1.schemas import EventLogResponse, EventResponse
from quantara_gateway.config import settings
from quantara_gateway.domain.events import EventBus
from quantara_gateway.domain.models import EventType

router = APIRouter()


@router.get("/events", response_model=EventLogResponse)
def get_events(
    type: Optional[EventType] = Query(None, description="Filter by event type"),
    limit: int = Query(settings.event_log_limit, ge=1, le=1000),
    event_bus: EventBus = Depends(get_event_bus),
):
    events = event_bus.get_log_by_type(type, limit) if type else event_bus.get_log(limit)
    items = [EventResponse(id=e.id, type=e.type, payload=e.payload, timestamp=e.timestamp) for e in events]
    return EventLogResponse(events=items, total=len(items))
