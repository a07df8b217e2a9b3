"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from quantara_gateway.domain.events import EventBus


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_event_bus(request: Request) -> EventBus:
    """Provide the application's event bus"""
    return request.app.state.event_bus
