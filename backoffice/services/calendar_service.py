from __future__ import annotations

import uuid

from backoffice.models import EventType
from backoffice.schemas import CalendarEvent, CalendarEventIn
from backoffice.services.state_service import AppState


def resolve_related_name(state: AppState, event_type: EventType, related_id: str | None) -> str:
    if not related_id:
        return ''
    if event_type == EventType.VISIT:
        candidates = state.customers
    elif event_type == EventType.DELIVERY:
        candidates = state.suppliers
    else:
        return ''
    for candidate in candidates:
        if candidate.id == related_id:
            return candidate.name
    return ''


def add_event(state: AppState, payload: CalendarEventIn) -> CalendarEvent:
    event = CalendarEvent(
        id=uuid.uuid4().hex,
        title=payload.title.strip(),
        description=payload.description,
        date=payload.date,
        time=payload.time,
        type=payload.type,
        related_id=payload.related_id or None,
        related_name=resolve_related_name(state, payload.type, payload.related_id),
    )
    state.events.append(event)
    return event


def delete_event(state: AppState, event_id: str) -> None:
    remaining = [event for event in state.events if event.id != event_id]
    if len(remaining) == len(state.events):
        raise ValueError('Event not found')
    state.events = remaining


def list_events(state: AppState) -> list[CalendarEvent]:
    return sorted(state.events, key=lambda event: (event.date, event.time), reverse=True)
