from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.auth import Principal, View, require_view
from backoffice.db import get_db
from backoffice.dependencies import commit_state
from backoffice.schemas import CalendarEventIn
from backoffice.services.calendar_service import add_event, delete_event, list_events
from backoffice.services.state_service import load_state
from backoffice.services.storage_service import EVENTS_KEY

router = APIRouter(prefix='/events', tags=['agenda'])
agenda_access = require_view(View.AGENDA)


@router.get('')
def events(principal: Principal = Depends(agenda_access), db: Session = Depends(get_db)):
    return list_events(load_state(db))


@router.post('', status_code=status.HTTP_201_CREATED)
def create_event(payload: CalendarEventIn, principal: Principal = Depends(agenda_access), db: Session = Depends(get_db)):
    state = load_state(db)
    event = add_event(state, payload)
    commit_state(db, state, EVENTS_KEY)
    return event


@router.delete('/{event_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_event(event_id: str, principal: Principal = Depends(agenda_access), db: Session = Depends(get_db)):
    state = load_state(db)
    try:
        delete_event(state, event_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    commit_state(db, state, EVENTS_KEY)
